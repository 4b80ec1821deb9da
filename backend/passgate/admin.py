"""Operator helpers for creating and maintaining accounts.

Usage: python bin/manage-accounts.py <command> [args]

Secrets are read from the terminal (or stdin when piped) and never echoed.
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys
from typing import TYPE_CHECKING

import structlog

from passgate.accounts.json_store import JsonAccountStore
from passgate.accounts.service import Accounts
from passgate.errors import BackendError, NotFoundError, PassgateError
from passgate.logging import setup_logging
from passgate.settings import PassgateSettings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from passgate.accounts.models import Account
    from passgate.accounts.store import AccountStore

logger = structlog.get_logger()


async def add_account(accounts: Accounts, name: str, secret: str | bytes, aux_data: bytes = b"") -> Account:
    """Create, challenge and persist a new account. Raise AlreadyExistsError if taken."""
    account = await accounts.new_account(name)
    account.aux_data = aux_data
    await accounts.set_challenge(account, secret)
    await accounts.persist(account)
    logger.info("added account", name=name, scheme=account.auth_type)
    return account


async def ensure_account(accounts: Accounts, name: str, secret: str | bytes) -> bool:
    """Create name with secret unless it already exists. Return True if created."""
    try:
        await accounts.get(name)
    except NotFoundError:
        await add_account(accounts, name, secret)
        return True
    return False


async def change_secret(accounts: Accounts, name: str, secret: str | bytes) -> Account:
    """Set a new challenge (and expiry) for an existing account."""
    account = await accounts.get(name)
    await accounts.set_challenge(account, secret)
    await accounts.persist(account)
    logger.info("changed account secret", name=name, scheme=account.auth_type)
    return account


async def set_locked(accounts: Accounts, name: str, *, locked: bool) -> Account:
    """Administratively lock or unlock an account."""
    account = await accounts.get(name)
    account.locked = locked
    await accounts.persist(account)
    logger.info("account lock changed", name=name, locked=locked)
    return account


async def rename_account(store: AccountStore, old_name: str, new_name: str) -> Account:
    """Move an account to new_name, replacing any account already stored there."""
    account = await store.get(old_name)
    try:
        await store.rename(new_name, account)
        await store.flush()
    except OSError as exc:
        raise BackendError("renaming account") from exc
    return account


async def delete_account(store: AccountStore, name: str) -> None:
    try:
        await store.delete(name)
        await store.flush()
    except OSError as exc:
        raise BackendError("deleting account") from exc
    logger.info("deleted account", name=name)


def _read_secret(prompt: str = "Password: ") -> str:
    if sys.stdin.isatty():
        return getpass.getpass(prompt)
    return sys.stdin.readline().rstrip("\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="manage-accounts", description="Manage passgate accounts.")
    parser.add_argument("--accounts-file", help="Override PASSGATE_ACCOUNTS_FILE")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Create an account")
    add.add_argument("name")
    add.add_argument("--aux-data", default="", help="Application data stored with the account")

    passwd = sub.add_parser("passwd", help="Set a new password")
    passwd.add_argument("name")

    for command, help_text in (("lock", "Lock an account"), ("unlock", "Unlock an account")):
        sub.add_parser(command, help=help_text).add_argument("name")

    rename = sub.add_parser("rename", help="Rename an account")
    rename.add_argument("old_name")
    rename.add_argument("new_name")

    delete = sub.add_parser("delete", help="Delete an account")
    delete.add_argument("name")
    return parser


async def run(args: argparse.Namespace, settings: PassgateSettings) -> str:
    """Execute one parsed command and return the message to print."""
    store = JsonAccountStore(args.accounts_file or settings.accounts_file)
    accounts = Accounts.from_settings(store, settings)

    match args.command:
        case "add":
            await add_account(accounts, args.name, _read_secret(), args.aux_data.encode("utf-8"))
            return f"Account added: {args.name}"
        case "passwd":
            await change_secret(accounts, args.name, _read_secret("New password: "))
            return f"Password changed: {args.name}"
        case "lock" | "unlock":
            await set_locked(accounts, args.name, locked=args.command == "lock")
            return f"Account {args.command}ed: {args.name}"
        case "rename":
            await rename_account(store, args.old_name, args.new_name)
            return f"Account renamed: {args.old_name} -> {args.new_name}"
        case "delete":
            await delete_account(store, args.name)
            return f"Account deleted: {args.name}"
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = PassgateSettings()
    setup_logging(log_dir=settings.log_dir)
    try:
        message = asyncio.run(run(args, settings))
    except PassgateError as e:
        detail = f"{e}: {e.__cause__}" if e.__cause__ is not None else str(e)
        print(f"Error: {detail}")
        return 1
    print(message)
    return 0

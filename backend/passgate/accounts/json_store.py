"""File-backed account store keeping every account in one JSON file."""

from __future__ import annotations

import asyncio
import contextlib
import os
import tempfile
from pathlib import Path

import structlog
from pydantic import TypeAdapter, ValidationError

from passgate.accounts.models import Account
from passgate.accounts.store import AccountStore
from passgate.errors import NotFoundError

logger = structlog.get_logger()

_FILE_PERMISSIONS = 0o600  # owner read/write only

_ACCOUNTS_ADAPTER = TypeAdapter(dict[str, Account])


class JsonAccountStore(AccountStore):
    """JSON file account store.

    Loads into memory on first access. update/delete/rename change the
    in-memory map only; flush writes the whole map back. Uses asyncio.Lock
    for write safety within a single process.

    No versioning or backups: only suitable for small, single-process
    deployments.
    """

    def __init__(self, file_path: str | Path, *, create: bool = True) -> None:
        self._file_path = Path(file_path)
        self._create = create
        self._accounts: dict[str, Account] = {}
        self._lock = asyncio.Lock()
        self._loaded = False

    async def _ensure_loaded(self) -> None:
        """Load accounts from file on first access."""
        async with self._lock:
            if self._loaded:
                return
            self._load_from_file()
            self._loaded = True

    def _load_from_file(self) -> None:
        """Load accounts from the JSON file into memory.

        A missing file is an empty store when create is set. Raises on
        read/parse failures for an existing file so a later flush cannot
        overwrite data we could not read.
        """
        self._accounts = {}

        if not self._file_path.exists():
            if self._create:
                return
            msg = f"Account store {self._file_path} does not exist"
            raise OSError(msg)

        try:
            raw = self._file_path.read_bytes()
        except OSError as exc:
            msg = f"Failed to read accounts from {self._file_path}"
            raise OSError(msg) from exc

        try:
            self._accounts = _ACCOUNTS_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            msg = f"Failed to parse account data from {self._file_path}"
            raise OSError(msg) from exc

    def _save_to_file(self, content: bytes) -> None:
        """Atomically replace the JSON file with content.

        Writes to a temporary file in the same directory, then renames into
        place so readers never see a partial file. The file holds password
        challenges, so it is owner-only.
        """
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self._file_path.parent,
            prefix=".accounts_",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fchmod(f.fileno(), _FILE_PERMISSIONS)
            Path(tmp_path).replace(self._file_path)
        except BaseException:
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise

    async def get(self, name: str) -> Account:
        """Return a copy of the named account. Changes need update() to stick."""
        await self._ensure_loaded()
        account = self._accounts.get(name)
        if account is None:
            raise NotFoundError(f"account '{name}' not found")
        return account.model_copy(deep=True)

    async def update(self, account: Account) -> None:
        await self._ensure_loaded()
        async with self._lock:
            self._accounts[account.name] = account.model_copy(deep=True)

    async def delete(self, name: str) -> None:
        await self._ensure_loaded()
        async with self._lock:
            self._accounts.pop(name, None)

    async def rename(self, new_name: str, account: Account) -> None:
        await self._ensure_loaded()
        async with self._lock:
            old_name = account.name
            self._accounts.pop(old_name, None)
            account.name = new_name
            self._accounts[new_name] = account.model_copy(deep=True)
        logger.info("renamed account", old_name=old_name, new_name=new_name)

    async def flush(self) -> None:
        """Write all accounts to disk, overwriting the existing file."""
        await self._ensure_loaded()
        async with self._lock:
            content = _ACCOUNTS_ADAPTER.dump_json(self._accounts, indent=2)
            self._save_to_file(content)

"""Shared fixtures: isolated registries, temporary stores and an Accounts service."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from passgate.accounts.json_store import JsonAccountStore
from passgate.accounts.service import Accounts
from passgate.auth.registry import MechanismRegistry
from passgate.tests.stubs import CountingMechanism, IdentityMechanism, XorMechanism

if TYPE_CHECKING:
    from pathlib import Path

PASSWORD_LIFETIME = timedelta(days=30)


@pytest.fixture
def counting():
    return CountingMechanism()


@pytest.fixture
def registry(counting):
    reg = MechanismRegistry()
    reg.register("A", IdentityMechanism())
    reg.register("B", XorMechanism())
    reg.register("COUNTING", counting)
    reg.freeze()
    return reg


@pytest.fixture
def store(tmp_path: Path):
    return JsonAccountStore(tmp_path / "accounts.json")


@pytest.fixture
def accounts(store, registry):
    return Accounts(store, auth_type="A", password_lifetime=PASSWORD_LIFETIME, registry=registry)

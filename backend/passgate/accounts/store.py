"""Abstract interface for account persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from passgate.accounts.models import Account


class AccountStore(ABC):
    """Abstract interface for account persistence, keyed by account name.

    Implementations can use files, SQLite, PostgreSQL, etc. Concurrent updates
    to different accounts must be safe, and concurrent updates to the same
    account must not corrupt the persisted representation.
    """

    @abstractmethod
    async def get(self, name: str) -> Account:
        """Return the named account or raise NotFoundError."""

    @abstractmethod
    async def update(self, account: Account) -> None:
        """Record account in the store's working set."""

    @abstractmethod
    async def flush(self) -> None:
        """Write pending changes to durable storage."""

    @abstractmethod
    async def delete(self, name: str) -> None:
        """Remove the named account. Missing names are ignored."""

    @abstractmethod
    async def rename(self, new_name: str, account: Account) -> None:
        """Move account to new_name, replacing any account already stored there.

        Sets account.name to new_name as a side effect.
        """

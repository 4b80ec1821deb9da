"""Accounts service coordinating credential verification, challenge updates and migration."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog
from anyio import to_thread

from passgate.accounts.models import Account, AuthResult
from passgate.auth.hashers import default_registry
from passgate.errors import AlreadyExistsError, BackendError, NotFoundError, UnknownSchemeError

if TYPE_CHECKING:
    from passgate.accounts.store import AccountStore
    from passgate.auth.registry import MechanismRegistry
    from passgate.settings import PassgateSettings

logger = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


class Accounts:
    """Verify, create and update accounts held in an AccountStore.

    Holds no mutable state of its own; concurrency guarantees come from the
    store. Mechanism calls run in a worker thread because password hashing is
    CPU-expensive on purpose.
    """

    def __init__(
        self,
        store: AccountStore,
        *,
        auth_type: str,
        password_lifetime: timedelta,
        registry: MechanismRegistry | None = None,
    ) -> None:
        self._store = store
        self._registry = registry if registry is not None else default_registry()
        if auth_type not in self._registry:
            raise UnknownSchemeError(auth_type)
        self._auth_type = auth_type
        self._password_lifetime = password_lifetime

    @classmethod
    def from_settings(
        cls,
        store: AccountStore,
        settings: PassgateSettings,
        registry: MechanismRegistry | None = None,
    ) -> Accounts:
        return cls(
            store,
            auth_type=settings.auth_type,
            password_lifetime=settings.password_lifetime,
            registry=registry,
        )

    @property
    def auth_type(self) -> str:
        return self._auth_type

    @property
    def password_lifetime(self) -> timedelta:
        return self._password_lifetime

    async def get(self, name: str) -> Account:
        """Fetch an account by name. Use authenticate() to check credentials."""
        return await self._store.get(name)

    async def authenticate(self, name: str, attempt: str | bytes) -> AuthResult:
        """Check attempt against the stored challenge for name.

        A wrong secret, a locked account and a missing account are normal
        outcomes reported through AuthResult flags. Only backend faults raise
        BackendError.

        Locked and missing accounts skip the challenge computation entirely,
        so response timing can reveal which names exist and are unlocked.
        Mitigate at a higher layer if that matters for the deployment.

        When the secret is correct but the challenge was stored under a scheme
        other than the configured one, the challenge is recomputed and
        persisted. A failure there leaves success=True and is reported in
        AuthResult.migration_error.
        """
        result = AuthResult()
        try:
            account = await self.get(name)
        except NotFoundError:
            result.not_exist = True
            logger.info("authentication failed", name=name, reason="not_found")
            return result
        except Exception as exc:
            raise BackendError("getting account") from exc

        result.account = account
        result.expired = account.is_expired(_utcnow())

        if account.locked:
            result.locked = True
            logger.info("authentication failed", name=name, reason="locked")
            return result

        if not account.auth_type:
            logger.info("authentication failed", name=name, reason="no_challenge")
            return result

        attempt_bytes = _as_bytes(attempt)
        try:
            result.success = await to_thread.run_sync(
                self._registry.verify,
                account.auth_type,
                account.auth_data,
                attempt_bytes,
            )
        except UnknownSchemeError as exc:
            raise BackendError("verifying account") from exc

        if not result.success:
            logger.info("authentication failed", name=name, reason="bad_credentials")
            return result

        if account.auth_type != self._auth_type:
            await self._migrate(result, account, attempt_bytes)

        return result

    async def new_account(self, name: str) -> Account:
        """Return a fresh, unsaved account. Raise AlreadyExistsError if name is taken.

        The existence check and the later persist() are separate steps, so two
        concurrent callers can both succeed and the last persist wins.
        """
        try:
            await self._store.get(name)
        except NotFoundError:
            return Account(name=name)
        except Exception as exc:
            raise BackendError("getting account") from exc
        raise AlreadyExistsError(f"account {name} already exists")

    async def set_challenge(self, account: Account, secret: str | bytes) -> None:
        """Replace the account's challenge and push its expiry out by the password lifetime.

        Does not persist. No length or character-set policy is applied here;
        applications may enforce a minimum length and should be generous on
        the maximum.
        """
        await self._replace_challenge(account, _as_bytes(secret))
        account.expires = _utcnow() + self._password_lifetime

    async def persist(self, account: Account) -> None:
        """Write account through the store, then flush the store."""
        try:
            await self._store.update(account)
        except Exception as exc:
            raise BackendError("updating account") from exc
        try:
            await self._store.flush()
        except Exception as exc:
            raise BackendError("flushing account update") from exc

    # -- private helpers --

    async def _replace_challenge(self, account: Account, secret: bytes) -> None:
        try:
            challenge = await to_thread.run_sync(self._registry.compute, self._auth_type, secret)
        except Exception as exc:
            raise BackendError("computing new challenge for account") from exc
        account.auth_type = self._auth_type
        account.auth_data = challenge

    async def _migrate(self, result: AuthResult, account: Account, secret: bytes) -> None:
        """Re-hash a verified secret under the configured scheme and persist it.

        result.account is swapped for the migrated record only once it is saved.
        """
        from_scheme = account.auth_type
        migrated = account.model_copy(deep=True)
        try:
            await self._replace_challenge(migrated, secret)
            await self.persist(migrated)
        except BackendError as exc:
            logger.warning(
                "account challenge migration failed",
                name=account.name,
                from_scheme=from_scheme,
                to_scheme=self._auth_type,
                exc_info=exc,
            )
            result.migration_error = exc
            return
        result.account = migrated
        logger.info(
            "migrated account challenge",
            name=account.name,
            from_scheme=from_scheme,
            to_scheme=self._auth_type,
        )

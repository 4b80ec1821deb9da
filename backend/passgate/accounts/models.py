"""Account record and authentication result models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from passgate.errors import BackendError


class Account(BaseModel):
    """Identity plus credential metadata, as held by an AccountStore.

    auth_type, auth_data and expires are managed by Accounts.set_challenge();
    applications should only touch aux_data.
    """

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64", validate_assignment=True)

    name: str
    auth_type: str = ""  # scheme that produced auth_data, empty until a challenge is set
    auth_data: bytes = b""
    locked: bool = False  # administrative override, disables verification
    expires: datetime | None = None  # auth_data is stale after this instant
    aux_data: bytes = b""

    @field_validator("expires")
    @classmethod
    def _assume_utc(cls, v: datetime | None) -> datetime | None:
        """Treat offset-naive timestamps as UTC so expiry checks can compare them."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires is None:
            return False
        now = now or datetime.now(tz=UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        return self.expires < now


@dataclass
class AuthResult:
    """Outcome of one authentication attempt. Never persisted."""

    account: Account | None = None
    success: bool = False
    expired: bool = False  # advisory: prompt the user to rotate their secret
    locked: bool = False
    not_exist: bool = False
    # Set when the credential was valid but re-hashing under the configured scheme failed
    migration_error: BackendError | None = None

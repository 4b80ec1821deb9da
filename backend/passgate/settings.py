"""Passgate configuration via environment variables."""

from datetime import timedelta

from pydantic import field_validator
from pydantic_settings import BaseSettings

from passgate.auth.hashers import BCRYPT_DEFAULT


class PassgateSettings(BaseSettings):
    model_config = {"env_prefix": "PASSGATE_"}

    # Scheme new challenges are computed with; older schemes migrate on login
    auth_type: str = BCRYPT_DEFAULT

    # How long a challenge stays fresh before the user should rotate it
    password_lifetime: timedelta = timedelta(days=365)

    # JSON account store path
    accounts_file: str = "data/accounts.json"

    # Sliding session lifetime and how often expired sessions are swept
    session_ttl: timedelta = timedelta(hours=20)
    session_sweep_interval: timedelta = timedelta(minutes=15)

    log_dir: str | None = None

    @field_validator("auth_type")
    @classmethod
    def validate_auth_type(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("auth_type must not be empty")
        return v

    @field_validator("session_ttl", "session_sweep_interval")
    @classmethod
    def validate_positive(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("duration must be positive")
        return v

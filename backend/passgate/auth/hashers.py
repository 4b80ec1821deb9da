"""Built-in challenge mechanisms: bcrypt and scrypt.

Both are deliberately CPU-expensive (tens to hundreds of milliseconds per
call). Accounts runs them off the event loop with anyio.to_thread.run_sync().
"""

from __future__ import annotations

import functools
import hashlib
import hmac
import secrets

import bcrypt

from passgate.auth.registry import MechanismRegistry

BCRYPT_DEFAULT = "BCRYPTDEFAULT"
SCRYPT_DEFAULT = "SCRYPTDEFAULT"

BCRYPT_DEFAULT_COST = 12
BCRYPT_MAX_SECRET_BYTES = 72

# Work memory ceiling for hashlib.scrypt; the default parameters need ~16 MiB
SCRYPT_MAXMEM = 64 * 1024 * 1024


class BcryptMechanism:
    """bcrypt at a fixed cost. The challenge is the self-contained bcrypt hash."""

    def __init__(self, cost: int = BCRYPT_DEFAULT_COST) -> None:
        self.cost = cost

    def compute(self, secret: bytes) -> bytes:
        if len(secret) > BCRYPT_MAX_SECRET_BYTES:
            raise ValueError(f"bcrypt secrets must not exceed {BCRYPT_MAX_SECRET_BYTES} bytes")
        return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=self.cost))

    def verify(self, challenge: bytes, attempt: bytes) -> bool:
        """Return False for malformed challenges rather than propagating a ValueError."""
        try:
            return bcrypt.checkpw(attempt, challenge)
        except ValueError:
            return False


class ScryptMechanism:
    """scrypt with a random salt. The challenge is salt || derived key."""

    def __init__(
        self,
        *,
        n: int = 16384,
        r: int = 8,
        p: int = 1,
        key_len: int = 32,
        salt_len: int = 32,
    ) -> None:
        self.n = n
        self.r = r
        self.p = p
        self.key_len = key_len
        self.salt_len = salt_len

    def _derive(self, secret: bytes, salt: bytes) -> bytes:
        return hashlib.scrypt(
            secret,
            salt=salt,
            n=self.n,
            r=self.r,
            p=self.p,
            maxmem=SCRYPT_MAXMEM,
            dklen=self.key_len,
        )

    def compute(self, secret: bytes) -> bytes:
        salt = secrets.token_bytes(self.salt_len)
        return salt + self._derive(secret, salt)

    def verify(self, challenge: bytes, attempt: bytes) -> bool:
        if len(challenge) != self.salt_len + self.key_len:
            return False
        salt, expected = challenge[: self.salt_len], challenge[self.salt_len :]
        try:
            derived = self._derive(attempt, salt)
        except ValueError:
            return False
        return hmac.compare_digest(derived, expected)


def build_default_registry() -> MechanismRegistry:
    """Return a new frozen registry holding the built-in mechanisms."""
    registry = MechanismRegistry()
    registry.register(BCRYPT_DEFAULT, BcryptMechanism())
    registry.register(SCRYPT_DEFAULT, ScryptMechanism())
    registry.freeze()
    return registry


@functools.cache
def default_registry() -> MechanismRegistry:
    """Return the process-wide registry of built-in mechanisms."""
    return build_default_registry()

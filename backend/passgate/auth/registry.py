"""Registry mapping scheme names to challenge mechanisms.

Mechanisms are registered once during process start-up and are never removed,
so credentials stored under a scheme stay verifiable for the process lifetime.
Complete all registrations (and call ``freeze()``) before serving traffic.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

import structlog

from passgate.errors import DuplicateSchemeError, RegistryFrozenError, UnknownSchemeError

logger = structlog.get_logger()


@runtime_checkable
class AuthMechanism(Protocol):
    """Turn a secret into a stored challenge and check attempts against it."""

    def compute(self, secret: bytes) -> bytes: ...

    def verify(self, challenge: bytes, attempt: bytes) -> bool: ...


class MechanismRegistry:
    """Write-once-per-name map of scheme name to AuthMechanism.

    Writers replace the whole mapping under a lock (copy-on-write), so lookups
    never observe a dict that is being mutated and need no locking.
    """

    def __init__(self) -> None:
        self._mechanisms: dict[str, AuthMechanism] = {}
        self._write_lock = threading.Lock()
        self._frozen = False

    def register(self, name: str, mechanism: AuthMechanism) -> None:
        """Install mechanism under name. Raise DuplicateSchemeError if name is taken."""
        with self._write_lock:
            if self._frozen:
                raise RegistryFrozenError(f"cannot register '{name}': registry is frozen")
            if name in self._mechanisms:
                raise DuplicateSchemeError(f"duplicate mechanism: {name}")
            self._mechanisms = {**self._mechanisms, name: mechanism}
        logger.debug("registered auth mechanism", scheme=name)

    def freeze(self) -> None:
        """Reject all further registrations."""
        with self._write_lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> list[str]:
        return sorted(self._mechanisms)

    def __contains__(self, name: object) -> bool:
        return name in self._mechanisms

    def get(self, name: str) -> AuthMechanism:
        mechanism = self._mechanisms.get(name)
        if mechanism is None:
            raise UnknownSchemeError(name)
        return mechanism

    def compute(self, name: str, secret: bytes) -> bytes:
        """Compute a challenge for secret using the named scheme."""
        return self.get(name).compute(secret)

    def verify(self, name: str, challenge: bytes, attempt: bytes) -> bool:
        """Check attempt against challenge using the named scheme.

        A mismatch returns False; only an unregistered scheme raises.
        """
        return self.get(name).verify(challenge, attempt)

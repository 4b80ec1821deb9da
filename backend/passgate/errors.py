"""Exception hierarchy for account verification and session management.

Callers branch on exception type (or on the ``is_*`` predicates for wrapped
errors) rather than matching message strings.
"""

from __future__ import annotations


class PassgateError(Exception):
    """Base class for all passgate errors."""


class NotFoundError(PassgateError):
    """No account is stored under the requested name."""


class AlreadyExistsError(PassgateError):
    """An account with the requested name already exists."""


class DuplicateSchemeError(PassgateError):
    """A mechanism was registered under a name that is already taken."""


class UnknownSchemeError(PassgateError):
    """No mechanism is registered under the requested scheme name."""

    def __init__(self, scheme: str) -> None:
        super().__init__(f"invalid auth type '{scheme}'")
        self.scheme = scheme


class RegistryFrozenError(PassgateError):
    """A mechanism was registered after the registry was frozen."""


class BackendError(PassgateError):
    """Storage or mechanism failure, wrapped with operation context."""


def _walk_causes(exc: BaseException | None):
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        yield exc
        exc = exc.__cause__


def is_not_found(exc: BaseException | None) -> bool:
    """Return True if exc, or anything it was raised from, is a NotFoundError."""
    return any(isinstance(e, NotFoundError) for e in _walk_causes(exc))


def is_unknown_scheme(exc: BaseException | None) -> bool:
    """Return True if exc, or anything it was raised from, is an UnknownSchemeError."""
    return any(isinstance(e, UnknownSchemeError) for e in _walk_causes(exc))

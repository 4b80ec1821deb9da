"""Password verification with scheme migration, plus sliding-expiry login sessions."""

from passgate.accounts import Account, Accounts, AccountStore, AuthResult, JsonAccountStore
from passgate.auth import (
    BCRYPT_DEFAULT,
    SCRYPT_DEFAULT,
    AuthMechanism,
    MechanismRegistry,
    build_default_registry,
    default_registry,
)
from passgate.errors import (
    AlreadyExistsError,
    BackendError,
    DuplicateSchemeError,
    NotFoundError,
    PassgateError,
    RegistryFrozenError,
    UnknownSchemeError,
    is_not_found,
    is_unknown_scheme,
)
from passgate.sessions import Session, SessionStore
from passgate.settings import PassgateSettings

__all__ = [
    "BCRYPT_DEFAULT",
    "SCRYPT_DEFAULT",
    "Account",
    "AccountStore",
    "Accounts",
    "AlreadyExistsError",
    "AuthMechanism",
    "AuthResult",
    "BackendError",
    "DuplicateSchemeError",
    "JsonAccountStore",
    "MechanismRegistry",
    "NotFoundError",
    "PassgateError",
    "PassgateSettings",
    "RegistryFrozenError",
    "Session",
    "SessionStore",
    "UnknownSchemeError",
    "build_default_registry",
    "default_registry",
    "is_not_found",
    "is_unknown_scheme",
]

"""Pluggable challenge mechanisms and the registry that names them."""

from passgate.auth.hashers import (
    BCRYPT_DEFAULT,
    SCRYPT_DEFAULT,
    BcryptMechanism,
    ScryptMechanism,
    build_default_registry,
    default_registry,
)
from passgate.auth.registry import AuthMechanism, MechanismRegistry

__all__ = [
    "BCRYPT_DEFAULT",
    "SCRYPT_DEFAULT",
    "AuthMechanism",
    "BcryptMechanism",
    "MechanismRegistry",
    "ScryptMechanism",
    "build_default_registry",
    "default_registry",
]

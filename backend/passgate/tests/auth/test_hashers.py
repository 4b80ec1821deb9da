"""Tests for the built-in bcrypt and scrypt mechanisms."""

from __future__ import annotations

import pytest

from passgate.auth.hashers import (
    BCRYPT_DEFAULT,
    SCRYPT_DEFAULT,
    BcryptMechanism,
    ScryptMechanism,
    build_default_registry,
    default_registry,
)
from passgate.errors import RegistryFrozenError
from passgate.tests.stubs import IdentityMechanism


@pytest.fixture
def fast_bcrypt():
    return BcryptMechanism(cost=4)


@pytest.fixture
def fast_scrypt():
    return ScryptMechanism(n=16, r=1, p=1)


class TestBcryptMechanism:
    def test_compute_and_verify_roundtrip(self, fast_bcrypt):
        challenge = fast_bcrypt.compute(b"my-secret-password")
        assert challenge.startswith(b"$2")
        assert fast_bcrypt.verify(challenge, b"my-secret-password") is True

    def test_wrong_password_rejected(self, fast_bcrypt):
        challenge = fast_bcrypt.compute(b"correct-password")
        assert fast_bcrypt.verify(challenge, b"wrong-password") is False

    def test_malformed_challenge_returns_false(self, fast_bcrypt):
        assert fast_bcrypt.verify(b"!", b"any-password") is False
        assert fast_bcrypt.verify(b"not-a-bcrypt-hash", b"any-password") is False

    def test_secret_over_72_bytes_rejected(self, fast_bcrypt):
        with pytest.raises(ValueError, match="72 bytes"):
            fast_bcrypt.compute(b"x" * 73)

    def test_uses_configured_cost(self, fast_bcrypt):
        assert fast_bcrypt.compute(b"pw").startswith(b"$2b$04$")


class TestScryptMechanism:
    def test_compute_and_verify_roundtrip(self, fast_scrypt):
        challenge = fast_scrypt.compute(b"my-secret-password")
        assert len(challenge) == 64  # 32-byte salt + 32-byte key
        assert fast_scrypt.verify(challenge, b"my-secret-password") is True

    def test_wrong_password_rejected(self, fast_scrypt):
        challenge = fast_scrypt.compute(b"correct-password")
        assert fast_scrypt.verify(challenge, b"wrong-password") is False

    def test_salt_is_random(self, fast_scrypt):
        assert fast_scrypt.compute(b"same") != fast_scrypt.compute(b"same")

    def test_truncated_challenge_returns_false(self, fast_scrypt):
        challenge = fast_scrypt.compute(b"pw")
        assert fast_scrypt.verify(challenge[:10], b"pw") is False
        assert fast_scrypt.verify(b"", b"pw") is False

    def test_default_parameters_roundtrip(self):
        mechanism = ScryptMechanism()
        challenge = mechanism.compute(b"hunter2")
        assert mechanism.verify(challenge, b"hunter2") is True


class TestDefaultRegistry:
    def test_contains_builtin_schemes(self):
        reg = build_default_registry()
        assert reg.names() == [BCRYPT_DEFAULT, SCRYPT_DEFAULT]
        assert isinstance(reg.get(BCRYPT_DEFAULT), BcryptMechanism)
        assert isinstance(reg.get(SCRYPT_DEFAULT), ScryptMechanism)

    def test_is_frozen(self):
        with pytest.raises(RegistryFrozenError):
            build_default_registry().register("EXTRA", IdentityMechanism())

    def test_process_wide_instance_is_cached(self):
        assert default_registry() is default_registry()

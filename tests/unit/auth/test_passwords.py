"""Unit tests for password hashing.

Tests cover:
- Hashing with a fresh salt
- Verification
- Async wrappers
"""

from __future__ import annotations

import pytest

from pantry_chef.auth.passwords import (
    hash_password,
    hash_password_async,
    verify_password,
    verify_password_async,
)


pytestmark = pytest.mark.unit

FAST_ROUNDS = 4


class TestHashPassword:
    """Tests for hash_password and verify_password."""

    def test_never_stores_plaintext(self) -> None:
        hashed = hash_password("hunter22", rounds=FAST_ROUNDS)

        assert hashed != "hunter22"
        assert hashed.startswith("$2b$04$")

    def test_salts_each_hash(self) -> None:
        assert hash_password("hunter22", rounds=FAST_ROUNDS) != hash_password(
            "hunter22", rounds=FAST_ROUNDS
        )

    def test_verifies_correct_password(self) -> None:
        hashed = hash_password("hunter22", rounds=FAST_ROUNDS)

        assert verify_password("hunter22", hashed) is True
        assert verify_password("hunter23", hashed) is False

    def test_malformed_hash(self) -> None:
        """Should report a mismatch instead of raising."""
        assert verify_password("hunter22", "not-a-bcrypt-hash") is False


class TestAsyncWrappers:
    """Tests for the thread-offloaded variants."""

    async def test_round_trip(self) -> None:
        hashed = await hash_password_async("hunter22", rounds=FAST_ROUNDS)

        assert await verify_password_async("hunter22", hashed) is True
        assert await verify_password_async("wrong", hashed) is False

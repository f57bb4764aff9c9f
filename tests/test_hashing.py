"""
Property-based tests for password hashing.

Hypothesis generates the plaintexts, including strings far longer than
bcrypt's 72-byte input window.
"""

import pytest
from hypothesis import HealthCheck, assume, given, settings
from hypothesis import strategies as st

from pfm.security.hashing import BcryptPasswordHasher


passwords = st.text(
    alphabet=st.characters(exclude_categories=("Cs",)),
    max_size=120,
)

long_suffixes = st.text(
    alphabet=st.characters(exclude_categories=("Cs",)),
    min_size=1,
    max_size=40,
)

hasher = BcryptPasswordHasher(rounds=4)


class TestBcryptPasswordHasher:
    """Round-trip and mismatch properties of the bcrypt hasher."""

    @settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(plaintext=passwords)
    def test_hash_then_verify_succeeds(self, plaintext):
        digest = hasher.hash(plaintext)
        assert hasher.verify(plaintext, digest) is True

    @settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(plaintext=passwords, other=passwords)
    def test_verify_with_other_plaintext_fails(self, plaintext, other):
        assume(plaintext != other)
        digest = hasher.hash(plaintext)
        assert hasher.verify(other, digest) is False

    @settings(max_examples=20, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(first=long_suffixes, second=long_suffixes)
    def test_passwords_sharing_a_long_prefix_differ(self, first, second):
        """Characters past the 72nd byte still decide the outcome."""
        assume(first != second)
        prefix = "a" * 72
        digest = hasher.hash(prefix + first)
        assert hasher.verify(prefix + second, digest) is False
        assert hasher.verify(prefix, digest) is False

    def test_digest_is_salted(self):
        """Test the same password hashes differently each time."""
        first = hasher.hash("correct horse battery")
        second = hasher.hash("correct horse battery")
        assert first != second
        assert hasher.verify("correct horse battery", first)
        assert hasher.verify("correct horse battery", second)

    def test_digest_never_contains_plaintext(self):
        digest = hasher.hash("longenough1")
        assert "longenough1" not in digest

    def test_verify_malformed_digest_returns_false(self):
        """Test that a non-bcrypt digest is a mismatch, not an error."""
        assert hasher.verify("longenough1", "not-a-bcrypt-digest") is False

    def test_configured_rounds_are_used(self):
        digest = BcryptPasswordHasher(rounds=5).hash("longenough1")
        assert digest.startswith("$2b$05$")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

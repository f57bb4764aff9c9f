"""
Password Hashing

The guard treats hashing as a black box behind PasswordHasher.
The production implementation is bcrypt: salted, deliberately slow,
and self-describing (the salt and cost live inside the digest).
"""

import base64
import hashlib
from abc import ABC, abstractmethod

import bcrypt


class PasswordHasher(ABC):
    """Hash and verify passwords. Implementations must be salted and slow."""

    @abstractmethod
    def hash(self, plaintext: str) -> str:
        """Return an opaque digest of plaintext."""
        pass

    @abstractmethod
    def verify(self, plaintext: str, digest: str) -> bool:
        """True iff plaintext matches digest. Never raises for a bad digest."""
        pass


class BcryptPasswordHasher(PasswordHasher):
    """
    bcrypt-backed hasher.

    NOTE: bcrypt only reads the first 72 bytes of its input. The password
    is first reduced to a base64 SHA-256 digest (44 bytes), so every
    character of a long password still affects the result.
    """

    def __init__(self, rounds: int = 12):
        self._rounds = rounds

    @staticmethod
    def _prehash(plaintext: str) -> bytes:
        return base64.b64encode(hashlib.sha256(plaintext.encode("utf-8")).digest())

    def hash(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(self._prehash(plaintext), salt).decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        try:
            return bcrypt.checkpw(self._prehash(plaintext), digest.encode("utf-8"))
        except ValueError:
            # Malformed or foreign digest
            return False

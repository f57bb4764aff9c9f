"""Security package: password hashing, attempt tracking and the account guard."""

from pfm.security.attempts import LoginAttemptTracker
from pfm.security.guard import AccountGuard, NotAuthenticated
from pfm.security.hashing import BcryptPasswordHasher, PasswordHasher

__all__ = [
    "AccountGuard",
    "BcryptPasswordHasher",
    "LoginAttemptTracker",
    "NotAuthenticated",
    "PasswordHasher",
]

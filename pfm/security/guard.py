"""
Account Guard

Registration, authentication and lockout for the single signed-in session.

Authentication step order is part of the contract, because it decides
which failure a caller sees:
1. Blank username or password      -> EMPTY_CREDENTIAL
2. Username currently locked       -> ACCOUNT_LOCKED (store not consulted,
                                      counter not bumped)
3. Unknown username                -> INVALID_CREDENTIAL (counter bumped)
4. Password does not verify        -> INVALID_CREDENTIAL (counter bumped)
5. Match                           -> counter and lockout reset, session set

CRITICAL: Expected failures are returned as AuthResult / RegistrationResult.
Only store faults (StorageError) propagate as exceptions.
"""

import threading
from datetime import datetime, timedelta
from typing import Optional

from pfm.clock import Clock, SystemClock
from pfm.config import SecuritySettings
from pfm.log import get_logger
from pfm.models.records import Account
from pfm.models.results import (
    AuthError,
    AuthResult,
    RegistrationError,
    RegistrationResult,
)
from pfm.security.attempts import LoginAttemptTracker
from pfm.security.hashing import PasswordHasher
from pfm.services.storage import DuplicateError, RecordStore


class NotAuthenticated(Exception):
    """A session-scoped operation was called with nobody signed in."""
    pass


class AccountGuard:
    """
    Verifies credentials and enforces the failed-attempt lockout policy.

    Holds at most one signed-in session at a time, like the desktop
    application it serves.
    """

    def __init__(
        self,
        store: RecordStore,
        hasher: PasswordHasher,
        clock: Optional[Clock] = None,
        settings: Optional[SecuritySettings] = None,
    ):
        self._store = store
        self._hasher = hasher
        self._clock = clock or SystemClock()
        self._settings = settings or SecuritySettings()
        self._attempts = LoginAttemptTracker(
            clock=self._clock,
            max_failed_attempts=self._settings.max_failed_attempts,
            lockout_duration=timedelta(minutes=self._settings.lockout_duration_minutes),
        )
        self._session_lock = threading.Lock()
        self._session: Optional[Account] = None
        self._logger = get_logger(__name__)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(self, username: str, password: str) -> RegistrationResult:
        """
        Create a new account.

        The username uniqueness pre-check is a fast path only; the store's
        DuplicateError on insert is the authoritative signal.
        """
        if not username.strip() or not password.strip():
            return self._reject_registration(username, RegistrationError.EMPTY_CREDENTIAL)

        if len(password) < self._settings.min_password_length:
            return self._reject_registration(username, RegistrationError.WEAK_PASSWORD)

        if self._store.find_account_by_username(username) is not None:
            return self._reject_registration(username, RegistrationError.DUPLICATE_USERNAME)

        account = Account(username=username, password_hash=self._hasher.hash(password))
        try:
            stored = self._store.insert_account(account)
        except DuplicateError:
            return self._reject_registration(username, RegistrationError.DUPLICATE_USERNAME)

        self._logger.info("account_registered", username=username, user_id=stored.id)
        return RegistrationResult.ok(user_id=stored.id)

    def _reject_registration(self, username: str, error: RegistrationError) -> RegistrationResult:
        self._logger.info("registration_rejected", username=username, reason=error.value)
        return RegistrationResult.fail(error, min_length=self._settings.min_password_length)

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def authenticate(self, username: str, password: str) -> AuthResult:
        """Verify credentials and, on success, open the session."""
        if not username.strip() or not password.strip():
            return AuthResult.fail(AuthError.EMPTY_CREDENTIAL)

        with self._attempts.locked(username):
            if self.is_locked(username):
                self._logger.warning("authentication_failed", username=username,
                                     reason=AuthError.ACCOUNT_LOCKED.value)
                return AuthResult.fail(AuthError.ACCOUNT_LOCKED)

            account = self._store.find_account_by_username(username)
            if account is None or not self._hasher.verify(password, account.password_hash):
                failures = self.increment_failure_counter(username)
                self._logger.warning("authentication_failed", username=username,
                                     reason=AuthError.INVALID_CREDENTIAL.value,
                                     failure_count=failures)
                return AuthResult.fail(AuthError.INVALID_CREDENTIAL)

            self._attempts.reset(username)

        with self._session_lock:
            self._session = account
        self._logger.info("authentication_succeeded", username=username, user_id=account.id)
        return AuthResult.ok(user_id=account.id)

    def is_locked(self, username: str) -> bool:
        """True while username is inside its lockout window (expired windows are cleared)."""
        return self._attempts.is_locked(username)

    def increment_failure_counter(self, username: str) -> int:
        """Record one failed attempt and return the new count."""
        return self._attempts.record_failure(username)

    def failure_count(self, username: str) -> int:
        return self._attempts.failure_count(username)

    def lockout_until(self, username: str) -> Optional[datetime]:
        return self._attempts.lockout_until(username)

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def logout(self, session_user_id: Optional[int] = None) -> None:
        """
        End the current session and reset attempt tracking.

        With reset_all_attempts_on_logout (the default) every username's
        counters are cleared, not only the signed-in user's.
        """
        with self._session_lock:
            account = self._session
            if session_user_id is not None and account is not None and account.id != session_user_id:
                self._logger.warning("logout_session_mismatch",
                                     requested_user_id=session_user_id,
                                     current_user_id=account.id)
            self._session = None

        if self._settings.reset_all_attempts_on_logout:
            self._attempts.reset_all()
        elif account is not None:
            self._attempts.reset(account.username)

        self._logger.info("logout", user_id=account.id if account else None)

    @property
    def current_user_id(self) -> Optional[int]:
        with self._session_lock:
            return self._session.id if self._session else None

    @property
    def current_username(self) -> Optional[str]:
        with self._session_lock:
            return self._session.username if self._session else None

    def require_session(self) -> int:
        """Return the signed-in user id or raise NotAuthenticated."""
        user_id = self.current_user_id
        if user_id is None:
            raise NotAuthenticated("No user is signed in")
        return user_id

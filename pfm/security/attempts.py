"""
Login Attempt Tracking

Process-wide, per-username failure counters and lockout deadlines.
Nothing here is persisted: a restart forgets every counter.

A username only has state while it has failures on record: state is
created by the first failure and discarded on success, on lockout
expiry and on reset.

Concurrency: usernames map onto a fixed pool of re-entrant locks, so
serialization does not depend on the state entry still existing.
Callers that need a check-then-act sequence (check lockout, verify, bump
counter) hold `locked(username)` for the whole sequence so two concurrent
failures can never both see count == threshold - 1 and skip the lockout.
Lock order is username lock, then registry lock.
"""

import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Iterator, Optional

from pfm.clock import Clock
from pfm.log import get_logger
from pfm.models.records import LoginAttemptState


logger = get_logger(__name__)


class LoginAttemptTracker:
    """
    Lockout state machine for every username.

        (no state) --failure--> OPEN (count 1)
        OPEN --failure (count < threshold)--> OPEN (count + 1)
        OPEN --failure (count reaches threshold)--> LOCKED (until now + duration)
        LOCKED --checked after deadline--> (no state)
        OPEN --success--> (no state)
    """

    LOCK_STRIPES = 64

    def __init__(
        self,
        clock: Clock,
        max_failed_attempts: int = 3,
        lockout_duration: timedelta = timedelta(minutes=1),
    ):
        self._clock = clock
        self._threshold = max_failed_attempts
        self._duration = lockout_duration
        self._stripes = [threading.RLock() for _ in range(self.LOCK_STRIPES)]
        self._registry_lock = threading.Lock()
        self._states: dict[str, LoginAttemptState] = {}

    def __len__(self) -> int:
        """Number of usernames with failures on record."""
        with self._registry_lock:
            return len(self._states)

    def _lock_for(self, username: str) -> threading.RLock:
        return self._stripes[hash(username) % len(self._stripes)]

    def _state(self, username: str) -> Optional[LoginAttemptState]:
        with self._registry_lock:
            return self._states.get(username)

    def _discard(self, username: str) -> None:
        with self._registry_lock:
            self._states.pop(username, None)

    @contextmanager
    def locked(self, username: str) -> Iterator[None]:
        """Serialize all attempt bookkeeping for one username."""
        with self._lock_for(username):
            yield

    def is_locked(self, username: str) -> bool:
        """
        True iff a lockout deadline exists and is still in the future.

        An expired deadline is cleared here, together with the counter.
        """
        with self._lock_for(username):
            state = self._state(username)
            if state is None or state.lockout_until is None:
                return False
            if state.lockout_until > self._clock.now():
                return True
            self._discard(username)
            logger.info("lockout_expired", username=username)
            return False

    def record_failure(self, username: str) -> int:
        """Count one failed attempt; lock the username on reaching the threshold."""
        with self._lock_for(username):
            with self._registry_lock:
                state = self._states.setdefault(username, LoginAttemptState())
                state.failure_count += 1
                count = state.failure_count
                if count >= self._threshold and state.lockout_until is None:
                    state.lockout_until = self._clock.now() + self._duration
                lockout_until = state.lockout_until

            if count == self._threshold:
                logger.warning(
                    "account_locked",
                    username=username,
                    failure_count=count,
                    lockout_until=lockout_until.isoformat(),
                )
            return count

    def reset(self, username: str) -> None:
        with self._lock_for(username):
            self._discard(username)

    def reset_all(self) -> None:
        with self._registry_lock:
            self._states.clear()

    def failure_count(self, username: str) -> int:
        state = self._state(username)
        return state.failure_count if state else 0

    def lockout_until(self, username: str) -> Optional[datetime]:
        state = self._state(username)
        return state.lockout_until if state else None

"""Shared fixtures: deterministic clock, in-memory store, cheap bcrypt."""

from datetime import datetime, timezone

import pytest

from pfm.clock import FixedClock
from pfm.config import SecuritySettings
from pfm.ledger import BudgetLedger
from pfm.security import AccountGuard, BcryptPasswordHasher
from pfm.services.storage import InMemoryRecordStore


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def hasher():
    # Minimum cost keeps the suite fast
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def security_settings():
    return SecuritySettings(
        max_failed_attempts=3,
        lockout_duration_minutes=1,
        min_password_length=8,
        bcrypt_rounds=4,
        reset_all_attempts_on_logout=True,
    )


@pytest.fixture
def guard(store, hasher, clock, security_settings):
    return AccountGuard(store=store, hasher=hasher, clock=clock, settings=security_settings)


@pytest.fixture
def ledger(store, clock):
    return BudgetLedger(store=store, clock=clock)

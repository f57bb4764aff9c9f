"""
Component wiring for the Personal Finance Manager core

This module ties the pieces together:
- the record store selected by StorageSettings
- the account guard (bcrypt hashing, lockout policy from SecuritySettings)
- the budget ledger
- the record service and its refresh bus

DESIGN DECISION: AccountGuard and BudgetLedger never reference each other.
Only this factory knows about both.
"""

from dataclasses import dataclass
from typing import Optional

from pfm.clock import Clock, SystemClock
from pfm.config import get_settings
from pfm.events import RefreshBus
from pfm.ledger import BudgetLedger
from pfm.log import get_logger
from pfm.security import AccountGuard, BcryptPasswordHasher, PasswordHasher
from pfm.services.records import FinanceRecordService
from pfm.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    RecordStore,
)


@dataclass
class AppComponents:
    """Everything a UI layer needs, built once per process."""
    store: RecordStore
    guard: AccountGuard
    ledger: BudgetLedger
    records: FinanceRecordService
    bus: RefreshBus


def create_record_store(backend: Optional[str] = None) -> RecordStore:
    """
    Build the configured record store.

    Args:
        backend: "memory" or "google_sheets". Defaults to StorageSettings.backend.
    """
    backend = backend or get_settings().storage.backend
    if backend == "google_sheets":
        return GoogleSheetsRecordStore(GoogleSheetsClient())
    if backend == "memory":
        return InMemoryRecordStore()
    raise ValueError(f"Unknown storage backend: {backend}")


def create_app_components(
    store: Optional[RecordStore] = None,
    clock: Optional[Clock] = None,
    hasher: Optional[PasswordHasher] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        store: Record store to use. Built from settings when omitted.
        clock: Time source shared by the guard and the ledger.
        hasher: Password hasher. bcrypt with the configured cost when omitted.
    """
    settings = get_settings()
    security = settings.security

    store = store or create_record_store()
    clock = clock or SystemClock()
    hasher = hasher or BcryptPasswordHasher(rounds=security.bcrypt_rounds)

    guard = AccountGuard(store=store, hasher=hasher, clock=clock, settings=security)
    ledger = BudgetLedger(store=store, clock=clock)
    bus = RefreshBus()
    records = FinanceRecordService(store=store, guard=guard, bus=bus)

    get_logger(__name__).info(
        "components_created",
        store=type(store).__name__,
        max_failed_attempts=security.max_failed_attempts,
        lockout_duration_minutes=security.lockout_duration_minutes,
    )
    return AppComponents(store=store, guard=guard, ledger=ledger, records=records, bus=bus)

"""
Storage Services Package

Provides the abstract record store interface and concrete implementations.
The in-memory store is the default; Google Sheets is available as a
persistent backend.
"""

from pfm.services.storage.interface import (
    DuplicateError,
    RecordStore,
    StorageError,
    StoreUnavailable,
)
from pfm.services.storage.memory import InMemoryRecordStore
from pfm.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)

__all__ = [
    # Interface
    "RecordStore",
    # Exceptions
    "DuplicateError",
    "StorageError",
    "StoreUnavailable",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
]

"""
Services package.

FinanceRecordService lives in pfm.services.records and is imported from
there directly, since it depends on the security layer.
"""

from pfm.services.storage import (
    DuplicateError,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    RecordStore,
    StorageError,
    StoreUnavailable,
)

__all__ = [
    "DuplicateError",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "RecordStore",
    "StorageError",
    "StoreUnavailable",
]

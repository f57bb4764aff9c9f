"""
Refresh Notifications

After a record changes, screens need to recompute their figures.
The core does not push summaries; it only announces that something changed
and lets each subscriber request a fresh BudgetLedger.compute_summary.
"""

import threading
from datetime import datetime
from enum import Enum
from typing import Callable

from pydantic import BaseModel, Field

from pfm.log import get_logger


class RecordType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"
    BUDGET = "budget"


class RecordAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class RefreshEvent(BaseModel):
    """A record owned by user_id was created, updated or deleted."""

    user_id: int
    record_type: RecordType
    action: RecordAction
    record_id: int
    occurred_at: datetime = Field(default_factory=datetime.now)


RefreshHandler = Callable[[RefreshEvent], None]


class RefreshBus:
    """
    Publish/subscribe fan-out for refresh events.

    A failing subscriber is logged and skipped; the remaining
    subscribers still receive the event.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: list[RefreshHandler] = []
        self._logger = get_logger(__name__)

    def subscribe(self, handler: RefreshHandler) -> None:
        with self._lock:
            if handler not in self._subscribers:
                self._subscribers.append(handler)

    def unsubscribe(self, handler: RefreshHandler) -> None:
        with self._lock:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

    def publish(self, event: RefreshEvent) -> int:
        """Deliver event to every subscriber; returns how many handled it without error."""
        with self._lock:
            handlers = list(self._subscribers)

        delivered = 0
        for handler in handlers:
            try:
                handler(event)
                delivered += 1
            except Exception:
                self._logger.exception(
                    "refresh_subscriber_failed",
                    handler=getattr(handler, "__name__", repr(handler)),
                    record_type=event.record_type.value,
                    action=event.action.value,
                )
        return delivered

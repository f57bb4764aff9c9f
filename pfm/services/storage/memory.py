"""
In-Memory Record Store

A complete RecordStore kept in process memory. Used by tests and by the
"memory" storage backend for local runs.

DESIGN DECISION: Username uniqueness is enforced here, inside the same lock
as the insert. The guard's pre-check is only a fast path; this is the
authoritative duplicate signal.
"""

import threading
from decimal import Decimal
from itertools import count
from typing import Optional, TypeVar

from pydantic import BaseModel

from pfm.models.period import in_month
from pfm.models.records import (
    Account,
    BudgetRecord,
    Category,
    ExpenseRecord,
    IncomeRecord,
)
from pfm.services.storage.interface import DuplicateError, RecordStore


RecordT = TypeVar("RecordT", bound=BaseModel)


class InMemoryRecordStore(RecordStore):
    """Thread-safe dictionary-backed store with integer ids."""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = count(1)
        self._accounts: dict[int, Account] = {}
        self._expenses: dict[int, ExpenseRecord] = {}
        self._incomes: dict[int, IncomeRecord] = {}
        self._budgets: dict[int, BudgetRecord] = {}

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def find_account_by_username(self, username: str) -> Optional[Account]:
        with self._lock:
            for account in self._accounts.values():
                if account.username == username:
                    return account.model_copy()
        return None

    def insert_account(self, account: Account) -> Account:
        with self._lock:
            if any(a.username == account.username for a in self._accounts.values()):
                raise DuplicateError(f"Username already exists: {account.username}")
            stored = account.model_copy(update={"id": next(self._ids)})
            self._accounts[stored.id] = stored
            return stored.model_copy()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find_expenses_by_user(self, user_id: int) -> list[ExpenseRecord]:
        return self._owned(self._expenses, user_id)

    def find_incomes_by_user(self, user_id: int) -> list[IncomeRecord]:
        return self._owned(self._incomes, user_id)

    def find_budgets_by_user(self, user_id: int) -> list[BudgetRecord]:
        return self._owned(self._budgets, user_id)

    def sum_expenses_by_user_and_category_and_month(
        self,
        user_id: int,
        category: Category,
        year: int,
        month: int,
    ) -> Decimal:
        return sum(
            (
                e.amount for e in self.find_expenses_by_user(user_id)
                if e.category == category and in_month(e.date, year, month)
            ),
            Decimal("0"),
        )

    def sum_expenses_by_user_and_month(self, user_id: int, year: int, month: int) -> Decimal:
        return sum(
            (e.amount for e in self.find_expenses_by_user(user_id) if in_month(e.date, year, month)),
            Decimal("0"),
        )

    def sum_income_by_user_and_month(self, user_id: int, year: int, month: int) -> Decimal:
        return sum(
            (i.amount for i in self.find_incomes_by_user(user_id) if in_month(i.date, year, month)),
            Decimal("0"),
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def insert_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        return self._insert(self._expenses, expense)

    def update_expense(self, expense: ExpenseRecord) -> bool:
        return self._update(self._expenses, expense)

    def delete_expense(self, expense_id: int, user_id: int) -> bool:
        return self._delete(self._expenses, expense_id, user_id)

    def insert_income(self, income: IncomeRecord) -> IncomeRecord:
        return self._insert(self._incomes, income)

    def update_income(self, income: IncomeRecord) -> bool:
        return self._update(self._incomes, income)

    def delete_income(self, income_id: int, user_id: int) -> bool:
        return self._delete(self._incomes, income_id, user_id)

    def insert_budget(self, budget: BudgetRecord) -> BudgetRecord:
        return self._insert(self._budgets, budget)

    def update_budget(self, budget: BudgetRecord) -> bool:
        return self._update(self._budgets, budget)

    def delete_budget(self, budget_id: int, user_id: int) -> bool:
        return self._delete(self._budgets, budget_id, user_id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _owned(self, table: dict[int, RecordT], user_id: int) -> list[RecordT]:
        with self._lock:
            return [r.model_copy() for r in table.values() if r.user_id == user_id]

    def _insert(self, table: dict[int, RecordT], record: RecordT) -> RecordT:
        with self._lock:
            stored = record.model_copy(update={"id": next(self._ids)})
            table[stored.id] = stored
            return stored.model_copy()

    def _update(self, table: dict[int, RecordT], record: RecordT) -> bool:
        with self._lock:
            existing = table.get(record.id)
            if existing is None or existing.user_id != record.user_id:
                return False
            table[record.id] = record.model_copy()
            return True

    def _delete(self, table: dict[int, RecordT], record_id: int, user_id: int) -> bool:
        with self._lock:
            existing = table.get(record_id)
            if existing is None or existing.user_id != user_id:
                return False
            del table[record_id]
            return True

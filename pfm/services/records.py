"""
Finance Record Service

Create, edit and delete expenses, incomes and budgets for the signed-in user.

DESIGN DECISION: The owner is always taken from the session, never from the
record passed in. A record built for another user_id is re-stamped, so a
session can only ever write its own rows.
"""

from typing import Optional

from pfm.events import RecordAction, RecordType, RefreshBus, RefreshEvent
from pfm.log import get_logger
from pfm.models.records import BudgetRecord, ExpenseRecord, IncomeRecord
from pfm.security.guard import AccountGuard
from pfm.services.storage import RecordStore


class FinanceRecordService:
    """Session-scoped record mutations that announce every change."""

    def __init__(
        self,
        store: RecordStore,
        guard: AccountGuard,
        bus: Optional[RefreshBus] = None,
    ):
        self._store = store
        self._guard = guard
        self._bus = bus or RefreshBus()
        self._logger = get_logger(__name__)

    @property
    def bus(self) -> RefreshBus:
        return self._bus

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        user_id = self._guard.require_session()
        stored = self._store.insert_expense(expense.model_copy(update={"user_id": user_id}))
        self._announce(user_id, RecordType.EXPENSE, RecordAction.CREATED, stored.id)
        return stored

    def update_expense(self, expense: ExpenseRecord) -> bool:
        user_id = self._guard.require_session()
        updated = self._store.update_expense(expense.model_copy(update={"user_id": user_id}))
        if updated:
            self._announce(user_id, RecordType.EXPENSE, RecordAction.UPDATED, expense.id)
        return updated

    def delete_expense(self, expense_id: int) -> bool:
        user_id = self._guard.require_session()
        deleted = self._store.delete_expense(expense_id, user_id)
        if deleted:
            self._announce(user_id, RecordType.EXPENSE, RecordAction.DELETED, expense_id)
        return deleted

    def list_expenses(self) -> list[ExpenseRecord]:
        return self._store.find_expenses_by_user(self._guard.require_session())

    # -------------------------------------------------------------------------
    # Incomes
    # -------------------------------------------------------------------------

    def add_income(self, income: IncomeRecord) -> IncomeRecord:
        user_id = self._guard.require_session()
        stored = self._store.insert_income(income.model_copy(update={"user_id": user_id}))
        self._announce(user_id, RecordType.INCOME, RecordAction.CREATED, stored.id)
        return stored

    def update_income(self, income: IncomeRecord) -> bool:
        user_id = self._guard.require_session()
        updated = self._store.update_income(income.model_copy(update={"user_id": user_id}))
        if updated:
            self._announce(user_id, RecordType.INCOME, RecordAction.UPDATED, income.id)
        return updated

    def delete_income(self, income_id: int) -> bool:
        user_id = self._guard.require_session()
        deleted = self._store.delete_income(income_id, user_id)
        if deleted:
            self._announce(user_id, RecordType.INCOME, RecordAction.DELETED, income_id)
        return deleted

    def list_incomes(self) -> list[IncomeRecord]:
        return self._store.find_incomes_by_user(self._guard.require_session())

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def add_budget(self, budget: BudgetRecord) -> BudgetRecord:
        user_id = self._guard.require_session()
        stored = self._store.insert_budget(budget.model_copy(update={"user_id": user_id}))
        self._announce(user_id, RecordType.BUDGET, RecordAction.CREATED, stored.id)
        return stored

    def update_budget(self, budget: BudgetRecord) -> bool:
        user_id = self._guard.require_session()
        updated = self._store.update_budget(budget.model_copy(update={"user_id": user_id}))
        if updated:
            self._announce(user_id, RecordType.BUDGET, RecordAction.UPDATED, budget.id)
        return updated

    def delete_budget(self, budget_id: int) -> bool:
        user_id = self._guard.require_session()
        deleted = self._store.delete_budget(budget_id, user_id)
        if deleted:
            self._announce(user_id, RecordType.BUDGET, RecordAction.DELETED, budget_id)
        return deleted

    def list_budgets(self) -> list[BudgetRecord]:
        return self._store.find_budgets_by_user(self._guard.require_session())

    def _announce(
        self,
        user_id: int,
        record_type: RecordType,
        action: RecordAction,
        record_id: int,
    ) -> None:
        self._logger.info(
            "record_changed",
            user_id=user_id,
            record_type=record_type.value,
            action=action.value,
            record_id=record_id,
        )
        self._bus.publish(RefreshEvent(
            user_id=user_id,
            record_type=record_type,
            action=action,
            record_id=record_id,
        ))

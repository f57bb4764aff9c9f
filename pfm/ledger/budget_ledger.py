"""
Budget Ledger

Derives budget-vs-spend figures from stored records. Nothing is cached or
written: every call reads the store and recomputes, so it is safe to call
concurrently, including for the same user.

DESIGN DECISION: Spend is category-wide for the reported month.
A budget's own period_start is not used to pick the month; the summary
always reports the requested (default: current) month, and two budgets
for the same category both see the same spent figure.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pfm.clock import Clock, SystemClock
from pfm.log import get_logger
from pfm.models.period import current_period, in_period, month_start
from pfm.models.records import (
    BudgetRecord,
    BudgetSummary,
    Category,
    ExpenseRecord,
    MonthlyTotals,
)
from pfm.services.storage import RecordStore


ZERO = Decimal("0")


class BudgetLedger:
    """
    Per-user budget rollups over the record store.

    Store failures (StoreUnavailable) propagate unchanged; an empty
    result is never an error.
    """

    def __init__(self, store: RecordStore, clock: Optional[Clock] = None):
        self._store = store
        self._clock = clock or SystemClock()
        self._logger = get_logger(__name__)

    def compute_summary(
        self,
        user_id: int,
        period_start: Optional[date] = None,
    ) -> list[BudgetSummary]:
        """
        One BudgetSummary per budget the user owns, in store order.

        Args:
            user_id: Owner of the budgets and expenses
            period_start: Any date in the month to report; defaults to the current month
        """
        period = month_start(period_start) if period_start else current_period(self._clock)

        budgets = self._store.find_budgets_by_user(user_id)
        if not budgets:
            return []

        spent_by_category = self._spent_per_category(
            self._store.find_expenses_by_user(user_id), period
        )
        summaries = [
            self._summarize(budget, spent_by_category.get(budget.category, ZERO))
            for budget in budgets
        ]

        self._logger.debug(
            "budget_summary_computed",
            user_id=user_id,
            period=period.isoformat(),
            budget_count=len(summaries),
            over_budget_count=sum(1 for s in summaries if s.is_over_budget),
        )
        return summaries

    def get_total_spent_per_category(self, user_id: int) -> dict[Category, Decimal]:
        """Current-month spend grouped by category (categories with no spend are absent)."""
        return self._spent_per_category(
            self._store.find_expenses_by_user(user_id),
            current_period(self._clock),
        )

    def get_total_spent_for_category(self, user_id: int, category: Category) -> Decimal:
        """Current-month spend for one category."""
        period = current_period(self._clock)
        return self._store.sum_expenses_by_user_and_category_and_month(
            user_id, category, period.year, period.month
        )

    def get_total_expense_for_month(self, user_id: int, year: int, month: int) -> Decimal:
        return self._store.sum_expenses_by_user_and_month(user_id, year, month)

    def get_total_income_for_month(self, user_id: int, year: int, month: int) -> Decimal:
        return self._store.sum_income_by_user_and_month(user_id, year, month)

    def get_monthly_totals(
        self,
        user_id: int,
        period_start: Optional[date] = None,
    ) -> MonthlyTotals:
        """Income, expense and net savings for a month (default: current month)."""
        period = month_start(period_start) if period_start else current_period(self._clock)
        total_income = self.get_total_income_for_month(user_id, period.year, period.month)
        total_expense = self.get_total_expense_for_month(user_id, period.year, period.month)
        return MonthlyTotals(
            period_start=period,
            total_income=total_income,
            total_expense=total_expense,
            net_savings=total_income - total_expense,
        )

    @staticmethod
    def _spent_per_category(
        expenses: list[ExpenseRecord],
        period: date,
    ) -> dict[Category, Decimal]:
        totals: dict[Category, Decimal] = {}
        for expense in expenses:
            if not in_period(expense.date, period):
                continue
            totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
        return totals

    @staticmethod
    def _summarize(budget: BudgetRecord, spent: Decimal) -> BudgetSummary:
        return BudgetSummary(
            budget_id=budget.id,
            category=budget.category,
            limit=budget.limit,
            spent=spent,
            remaining=budget.limit - spent,
            over_amount=max(ZERO, spent - budget.limit),
        )

"""
Tests for BudgetLedger rollups.

All figures are computed against a FixedClock set to 2024-03-15, so the
"current month" is March 2024.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from pfm.ledger import BudgetLedger
from pfm.models.records import BudgetRecord, Category, ExpenseRecord, IncomeRecord
from pfm.services.storage import StoreUnavailable


USER = 1
OTHER_USER = 2


def add_expense(store, amount, category=Category.GROCERIES, on=date(2024, 3, 10), user_id=USER):
    return store.insert_expense(
        ExpenseRecord(user_id=user_id, amount=Decimal(amount), category=category, date=on)
    )


def add_income(store, amount, on=date(2024, 3, 1), user_id=USER, source="Salary"):
    return store.insert_income(
        IncomeRecord(user_id=user_id, amount=Decimal(amount), source=source, date=on)
    )


def add_budget(store, limit, category=Category.GROCERIES, user_id=USER, period=date(2024, 3, 1)):
    return store.insert_budget(
        BudgetRecord(user_id=user_id, category=category, limit=Decimal(limit), period_start=period)
    )


class TestComputeSummary:
    """Tests for BudgetLedger.compute_summary."""

    def test_no_budgets_returns_empty_list(self, ledger, store):
        add_expense(store, "50.00")
        assert ledger.compute_summary(USER) == []

    def test_over_budget(self, ledger, store):
        """Spending 120 against a 100 budget leaves -20 remaining and 20 over."""
        budget = add_budget(store, "100.00")
        add_expense(store, "70.00")
        add_expense(store, "50.00")

        [summary] = ledger.compute_summary(USER)
        assert summary.budget_id == budget.id
        assert summary.category == Category.GROCERIES
        assert summary.limit == Decimal("100.00")
        assert summary.spent == Decimal("120.00")
        assert summary.remaining == Decimal("-20.00")
        assert summary.over_amount == Decimal("20.00")
        assert summary.is_over_budget is True

    def test_under_budget(self, ledger, store):
        add_budget(store, "100.00")
        add_expense(store, "80.00")

        [summary] = ledger.compute_summary(USER)
        assert summary.spent == Decimal("80.00")
        assert summary.remaining == Decimal("20.00")
        assert summary.over_amount == Decimal("0")
        assert summary.is_over_budget is False

    def test_budget_without_spend(self, ledger, store):
        add_budget(store, "40.00", category=Category.HOBBIES)
        add_expense(store, "80.00", category=Category.GROCERIES)

        [summary] = ledger.compute_summary(USER)
        assert summary.spent == Decimal("0")
        assert summary.remaining == Decimal("40.00")

    def test_exactly_on_budget_is_not_over(self, ledger, store):
        add_budget(store, "100.00")
        add_expense(store, "100.00")

        [summary] = ledger.compute_summary(USER)
        assert summary.remaining == Decimal("0")
        assert summary.over_amount == Decimal("0")
        assert summary.is_over_budget is False

    def test_invariants_hold_for_every_summary(self, ledger, store):
        """remaining == limit - spent and over_amount == max(0, spent - limit)."""
        add_budget(store, "100.00", category=Category.GROCERIES)
        add_budget(store, "30.00", category=Category.TRAVEL)
        add_budget(store, "55.55", category=Category.UTILITIES)
        add_expense(store, "120.00", category=Category.GROCERIES)
        add_expense(store, "12.34", category=Category.TRAVEL)

        for summary in ledger.compute_summary(USER):
            assert summary.remaining == summary.limit - summary.spent
            assert summary.over_amount == max(Decimal("0"), summary.spent - summary.limit)

    def test_summaries_follow_store_order(self, ledger, store):
        categories = [Category.TRAVEL, Category.GROCERIES, Category.INSURANCE]
        for category in categories:
            add_budget(store, "10.00", category=category)

        assert [s.category for s in ledger.compute_summary(USER)] == categories

    def test_duplicate_category_budgets_share_spend(self, ledger, store):
        """Two budgets on one category both see the full category spend."""
        add_budget(store, "100.00")
        add_budget(store, "200.00")
        add_expense(store, "150.00")

        first, second = ledger.compute_summary(USER)
        assert first.spent == second.spent == Decimal("150.00")
        assert first.over_amount == Decimal("50.00")
        assert second.remaining == Decimal("50.00")

    def test_other_months_are_excluded(self, ledger, store):
        add_budget(store, "100.00")
        add_expense(store, "10.00", on=date(2024, 3, 1))
        add_expense(store, "20.00", on=date(2024, 3, 31))
        add_expense(store, "500.00", on=date(2024, 2, 29))
        add_expense(store, "500.00", on=date(2024, 4, 1))
        add_expense(store, "500.00", on=date(2023, 3, 15))

        [summary] = ledger.compute_summary(USER)
        assert summary.spent == Decimal("30.00")

    def test_other_users_are_excluded(self, ledger, store):
        add_budget(store, "100.00")
        add_budget(store, "100.00", user_id=OTHER_USER)
        add_expense(store, "10.00")
        add_expense(store, "90.00", user_id=OTHER_USER)

        [summary] = ledger.compute_summary(USER)
        assert summary.spent == Decimal("10.00")

    def test_explicit_period(self, ledger, store):
        add_budget(store, "100.00")
        add_expense(store, "30.00", on=date(2024, 1, 20))
        add_expense(store, "99.00", on=date(2024, 3, 5))

        [summary] = ledger.compute_summary(USER, period_start=date(2024, 1, 9))
        assert summary.spent == Decimal("30.00")

    def test_recomputes_on_every_call(self, ledger, store):
        add_budget(store, "100.00")
        assert ledger.compute_summary(USER)[0].spent == Decimal("0")

        add_expense(store, "25.00")
        assert ledger.compute_summary(USER)[0].spent == Decimal("25.00")

    def test_store_failure_propagates(self, clock):
        store = MagicMock()
        store.find_budgets_by_user.side_effect = StoreUnavailable("down")
        ledger = BudgetLedger(store=store, clock=clock)

        with pytest.raises(StoreUnavailable):
            ledger.compute_summary(USER)


class TestCategoryTotals:
    """Tests for per-category spend queries."""

    def test_total_spent_per_category(self, ledger, store):
        add_expense(store, "10.00", category=Category.GROCERIES)
        add_expense(store, "15.50", category=Category.GROCERIES)
        add_expense(store, "40.00", category=Category.TRAVEL)
        add_expense(store, "99.00", category=Category.TRAVEL, on=date(2024, 2, 10))

        totals = ledger.get_total_spent_per_category(USER)
        assert totals == {
            Category.GROCERIES: Decimal("25.50"),
            Category.TRAVEL: Decimal("40.00"),
        }

    def test_total_spent_per_category_empty(self, ledger):
        assert ledger.get_total_spent_per_category(USER) == {}

    def test_total_spent_for_category(self, ledger, store):
        add_expense(store, "10.00", category=Category.SHOPPING)
        add_expense(store, "5.25", category=Category.SHOPPING)
        add_expense(store, "7.00", category=Category.SHOPPING, on=date(2024, 4, 2))
        add_expense(store, "3.00", category=Category.OTHER)

        assert ledger.get_total_spent_for_category(USER, Category.SHOPPING) == Decimal("15.25")
        assert ledger.get_total_spent_for_category(USER, Category.HOBBIES) == Decimal("0")


class TestMonthlyTotals:
    """Tests for month-level income and expense totals."""

    def test_total_expense_for_month(self, ledger, store):
        add_expense(store, "10.00", on=date(2024, 1, 1))
        add_expense(store, "20.00", category=Category.TRAVEL, on=date(2024, 1, 31))
        add_expense(store, "40.00", on=date(2024, 2, 1))

        assert ledger.get_total_expense_for_month(USER, 2024, 1) == Decimal("30.00")
        assert ledger.get_total_expense_for_month(USER, 2024, 6) == Decimal("0")

    def test_total_income_for_month(self, ledger, store):
        add_income(store, "2500.00", on=date(2024, 2, 1))
        add_income(store, "150.00", on=date(2024, 2, 20), source="Side project")
        add_income(store, "2500.00", on=date(2024, 3, 1))
        add_income(store, "9999.00", on=date(2024, 2, 1), user_id=OTHER_USER)

        assert ledger.get_total_income_for_month(USER, 2024, 2) == Decimal("2650.00")

    def test_monthly_totals_default_to_current_month(self, ledger, store):
        add_income(store, "2000.00")
        add_expense(store, "1500.00")
        add_expense(store, "800.00", on=date(2024, 2, 3))

        totals = ledger.get_monthly_totals(USER)
        assert totals.period_start == date(2024, 3, 1)
        assert totals.total_income == Decimal("2000.00")
        assert totals.total_expense == Decimal("1500.00")
        assert totals.net_savings == Decimal("500.00")
        assert totals.advice.startswith("Great job!")

    def test_monthly_totals_overspent(self, ledger, store):
        add_income(store, "100.00", on=date(2024, 2, 1))
        add_expense(store, "800.00", on=date(2024, 2, 3))

        totals = ledger.get_monthly_totals(USER, period_start=date(2024, 2, 14))
        assert totals.net_savings == Decimal("-700.00")
        assert "spent more than your income" in totals.advice


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

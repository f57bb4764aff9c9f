"""
Core Data Models for the Personal Finance Manager

These models define the schemas for accounts and the financial records
that belong to them. They are designed to:
1. Enforce positive amounts and a closed category set at runtime
2. Be serializable for any record store
3. Keep secrets out of reprs and logs

DESIGN DECISION: Every record is owned by exactly one user_id.
There is no cross-user sharing anywhere in the model.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Category(str, Enum):
    """
    Expense and budget categories.

    DESIGN DECISION: Expenses and budgets are matched on this closed set,
    so a budget can only ever track spend that could actually be recorded.
    """
    GROCERIES = "Groceries"          # Food and household supplies
    SHOPPING = "Shopping"            # Clothes, gadgets, general shopping
    UTILITIES = "Utilities"          # Electricity, water, internet
    ENTERTAINMENT = "Entertainment"  # Movies, events, subscriptions
    INSURANCE = "Insurance"          # Health, vehicle, property
    HOBBIES = "Hobbies"
    TRAVEL = "Travel"
    OTHER = "Other"


# =============================================================================
# ACCOUNTS
# =============================================================================

class Account(BaseModel):
    """
    Identity record.

    CRITICAL: password_hash is an opaque digest, never the plaintext.
    It is excluded from repr so it cannot leak through logs or tracebacks.
    """

    id: Optional[int] = Field(
        default=None,
        description="Assigned by the record store on creation"
    )
    username: str = Field(
        ...,
        min_length=1,
        description="Unique, case-sensitive login name"
    )
    password_hash: str = Field(
        ...,
        min_length=1,
        repr=False,
        description="Salted one-way digest of the password"
    )


@dataclass
class LoginAttemptState:
    """
    Process-local failure counter for one username.

    lockout_until is only ever set once failure_count has reached
    the configured threshold. Never persisted.
    """
    failure_count: int = 0
    lockout_until: Optional[datetime] = None


# =============================================================================
# FINANCIAL RECORDS
# =============================================================================

class ExpenseRecord(BaseModel):
    """A single expense, always in one of the fixed categories."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[int] = None
    user_id: int = Field(..., description="Owning user")
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount spent"
    )
    category: Category
    date: date


class IncomeRecord(BaseModel):
    """A single income entry; carries a free-form source instead of a category."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[int] = None
    user_id: int
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    source: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Where the money came from (e.g. 'Salary')"
    )
    date: date


class BudgetRecord(BaseModel):
    """
    A declared spending limit for (user_id, category, period_start).

    Nothing here stops a user holding two budgets for the same category
    and month; both are reported independently by the ledger.
    """

    id: Optional[int] = None
    user_id: int
    category: Category
    limit: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Spending limit for the month"
    )
    period_start: date = Field(
        ...,
        description="First day of the month the budget applies to"
    )

    @field_validator('period_start')
    @classmethod
    def normalise_to_month_start(cls, v: date) -> date:
        """Budgets are monthly; any day of the month identifies the period."""
        return v.replace(day=1)


# =============================================================================
# DERIVED FIGURES
# =============================================================================

class BudgetSummary(BaseModel):
    """
    Spend against one BudgetRecord for one period.

    remaining may be negative; over_amount never is.
    """

    budget_id: Optional[int] = None
    category: Category
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    over_amount: Decimal = Field(..., ge=0)

    @property
    def is_over_budget(self) -> bool:
        return self.over_amount > 0

    @property
    def usage_ratio(self) -> Decimal:
        """Fraction of the limit consumed (1 means exactly on budget)."""
        return self.spent / self.limit


class MonthlyTotals(BaseModel):
    """Income, expense and net savings for one calendar month."""

    period_start: date
    total_income: Decimal
    total_expense: Decimal
    net_savings: Decimal

    @property
    def has_data(self) -> bool:
        return self.total_income != 0 or self.total_expense != 0

    @property
    def advice(self) -> str:
        """Short feedback line shown next to the monthly report."""
        if not self.has_data:
            return ""
        if self.net_savings > 0:
            return "Great job! Your savings are on track for this month. Keep up the good work!"
        return (
            "Looks like you've spent more than your income this month. "
            "Try to save more next month."
        )

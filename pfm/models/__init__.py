"""
Data Models Package

This package contains the Pydantic models used by the account and budget core.
All data flowing through the system must conform to these schemas.
"""

from pfm.models.records import (
    Account,
    BudgetRecord,
    BudgetSummary,
    Category,
    ExpenseRecord,
    IncomeRecord,
    LoginAttemptState,
    MonthlyTotals,
)
from pfm.models.results import (
    AuthError,
    AuthResult,
    RegistrationError,
    RegistrationResult,
)

__all__ = [
    # Records
    "Account",
    "BudgetRecord",
    "BudgetSummary",
    "Category",
    "ExpenseRecord",
    "IncomeRecord",
    "LoginAttemptState",
    "MonthlyTotals",
    # Results
    "AuthError",
    "AuthResult",
    "RegistrationError",
    "RegistrationResult",
]

"""
Abstract Record Store Interface

DESIGN DECISION: The core never talks to a database directly.
It depends on this interface so that:
1. The backend (Google Sheets, SQL, ...) can be swapped freely
2. Tests can use the in-memory store
3. The guard and the ledger stay pure logic over supplied data

All calls are synchronous. A backend that cannot complete a call
raises StoreUnavailable rather than hanging or returning a guess.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from pfm.models.records import (
    Account,
    BudgetRecord,
    Category,
    ExpenseRecord,
    IncomeRecord,
)


class RecordStore(ABC):
    """
    Abstract interface for account and finance record storage.

    Every update/delete is scoped by record id AND user id, so a user
    can never touch another user's rows.
    """

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    @abstractmethod
    def find_account_by_username(self, username: str) -> Optional[Account]:
        """
        Look up an account by exact (case-sensitive) username.

        Returns:
            The account if found, None otherwise
        """
        pass

    @abstractmethod
    def insert_account(self, account: Account) -> Account:
        """
        Insert a new account.

        Returns:
            The stored account with its id assigned

        Raises:
            DuplicateError: If the username is already taken
            StoreUnavailable: If the backend fails
        """
        pass

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @abstractmethod
    def find_expenses_by_user(self, user_id: int) -> list[ExpenseRecord]:
        pass

    @abstractmethod
    def find_incomes_by_user(self, user_id: int) -> list[IncomeRecord]:
        pass

    @abstractmethod
    def find_budgets_by_user(self, user_id: int) -> list[BudgetRecord]:
        """Budgets owned by the user, in storage order."""
        pass

    @abstractmethod
    def sum_expenses_by_user_and_category_and_month(
        self,
        user_id: int,
        category: Category,
        year: int,
        month: int,
    ) -> Decimal:
        """Total expense amount for one category in one calendar month (0 if none)."""
        pass

    @abstractmethod
    def sum_expenses_by_user_and_month(
        self,
        user_id: int,
        year: int,
        month: int,
    ) -> Decimal:
        """Total expense amount in one calendar month (0 if none)."""
        pass

    @abstractmethod
    def sum_income_by_user_and_month(
        self,
        user_id: int,
        year: int,
        month: int,
    ) -> Decimal:
        """Total income amount in one calendar month (0 if none)."""
        pass

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @abstractmethod
    def insert_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        """Insert an expense and return it with its id assigned."""
        pass

    @abstractmethod
    def update_expense(self, expense: ExpenseRecord) -> bool:
        """
        Update an expense matched by expense.id and expense.user_id.

        Returns:
            True if a row owned by the user was updated
        """
        pass

    @abstractmethod
    def delete_expense(self, expense_id: int, user_id: int) -> bool:
        pass

    @abstractmethod
    def insert_income(self, income: IncomeRecord) -> IncomeRecord:
        pass

    @abstractmethod
    def update_income(self, income: IncomeRecord) -> bool:
        pass

    @abstractmethod
    def delete_income(self, income_id: int, user_id: int) -> bool:
        pass

    @abstractmethod
    def insert_budget(self, budget: BudgetRecord) -> BudgetRecord:
        pass

    @abstractmethod
    def update_budget(self, budget: BudgetRecord) -> bool:
        pass

    @abstractmethod
    def delete_budget(self, budget_id: int, user_id: int) -> bool:
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StoreUnavailable(StorageError):
    """The storage backend could not be reached or failed mid-call."""
    pass

"""
Google Sheets Record Store

DESIGN DECISION: Google Sheets can back the record store because:
1. Users can view their own data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- No transactions or unique indexes, so username uniqueness is
  checked immediately before the append (a race remains between
  two processes writing the same spreadsheet)
- Limited query capabilities (we filter and sum in Python)

Every gspread failure is surfaced as StoreUnavailable. Reads and row
rewrites retry transient API errors with exponential backoff. Appends and
deletes are never retried: a call that failed after the sheet applied it
would run twice.
"""

import functools
from datetime import date
from decimal import Decimal
from typing import Callable, Optional, TypeVar

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from pydantic import BaseModel
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pfm.config import get_settings
from pfm.log import get_logger
from pfm.models.period import in_month
from pfm.models.records import (
    Account,
    BudgetRecord,
    Category,
    ExpenseRecord,
    IncomeRecord,
)
from pfm.services.storage.interface import (
    DuplicateError,
    RecordStore,
    StorageError,
    StoreUnavailable,
)


logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


# Column layouts, one header row per sheet
USER_COLUMNS = ["id", "username", "password_hash"]
EXPENSE_COLUMNS = ["id", "user_id", "amount", "category", "date"]
INCOME_COLUMNS = ["id", "user_id", "amount", "source", "date"]
BUDGET_COLUMNS = ["id", "user_id", "category", "budget_limit", "date"]


def _log_retry(retry_state) -> None:
    logger.warning(
        "storage_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()),
    )


# Only for idempotent calls. Retry only what is likely to be transient.
retry_transient = retry(
    retry=retry_if_exception_type(gspread.exceptions.APIError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    before_sleep=_log_retry,
    reraise=True,
)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and creates missing worksheets with headers.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StoreUnavailable(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreUnavailable(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StoreUnavailable(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create(self, title: str, columns: list[str]) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_users_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.users_sheet_name, USER_COLUMNS)

    def get_expenses_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.expenses_sheet_name, EXPENSE_COLUMNS)

    def get_incomes_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.incomes_sheet_name, INCOME_COLUMNS)

    def get_budgets_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.budgets_sheet_name, BUDGET_COLUMNS)


# =============================================================================
# ROW CONVERSION
# =============================================================================

def _account_to_row(account: Account) -> list:
    return [str(account.id), account.username, account.password_hash]


def _row_to_account(row: list) -> Account:
    return Account(id=int(row[0]), username=row[1], password_hash=row[2])


def _expense_to_row(expense: ExpenseRecord) -> list:
    return [
        str(expense.id),
        str(expense.user_id),
        str(expense.amount),
        expense.category.value,
        expense.date.isoformat(),
    ]


def _row_to_expense(row: list) -> ExpenseRecord:
    return ExpenseRecord(
        id=int(row[0]),
        user_id=int(row[1]),
        amount=Decimal(row[2]),
        category=Category(row[3]),
        date=date.fromisoformat(row[4]),
    )


def _income_to_row(income: IncomeRecord) -> list:
    return [
        str(income.id),
        str(income.user_id),
        str(income.amount),
        income.source,
        income.date.isoformat(),
    ]


def _row_to_income(row: list) -> IncomeRecord:
    return IncomeRecord(
        id=int(row[0]),
        user_id=int(row[1]),
        amount=Decimal(row[2]),
        source=row[3],
        date=date.fromisoformat(row[4]),
    )


def _budget_to_row(budget: BudgetRecord) -> list:
    return [
        str(budget.id),
        str(budget.user_id),
        budget.category.value,
        str(budget.limit),
        budget.period_start.isoformat(),
    ]


def _row_to_budget(row: list) -> BudgetRecord:
    return BudgetRecord(
        id=int(row[0]),
        user_id=int(row[1]),
        category=Category(row[2]),
        limit=Decimal(row[3]),
        period_start=date.fromisoformat(row[4]),
    )


def surfaces_as_unavailable(action: str):
    """
    Translate backend failures into StoreUnavailable.

    Applied outside the retry, so an APIError that is still failing
    after the last attempt is translated too. StorageErrors
    (e.g. DuplicateError) pass through unchanged.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except StorageError:
                raise
            except Exception as e:
                raise StoreUnavailable(f"Failed to {action}: {e}") from e
        return wrapper
    return decorator


class GoogleSheetsRecordStore(RecordStore):
    """
    Google Sheets implementation of the record store.

    One worksheet per record type, one record per row.
    Ids are assigned as (largest id in the sheet) + 1.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    @surfaces_as_unavailable("look up account")
    @retry_transient
    def find_account_by_username(self, username: str) -> Optional[Account]:
        for row in self._data_rows(self._client.get_users_sheet()):
            if row[1] == username:
                return _row_to_account(row)
        return None

    @surfaces_as_unavailable("insert account")
    def insert_account(self, account: Account) -> Account:
        sheet = self._client.get_users_sheet()
        rows = self._data_rows(sheet)
        if any(row[1] == account.username for row in rows):
            raise DuplicateError(f"Username already exists: {account.username}")
        stored = account.model_copy(update={"id": self._next_id(rows)})
        sheet.append_row(_account_to_row(stored), value_input_option="RAW")
        return stored

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find_expenses_by_user(self, user_id: int) -> list[ExpenseRecord]:
        return self._find_owned(self._client.get_expenses_sheet, _row_to_expense, user_id)

    def find_incomes_by_user(self, user_id: int) -> list[IncomeRecord]:
        return self._find_owned(self._client.get_incomes_sheet, _row_to_income, user_id)

    def find_budgets_by_user(self, user_id: int) -> list[BudgetRecord]:
        return self._find_owned(self._client.get_budgets_sheet, _row_to_budget, user_id)

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
        return self._insert(self._client.get_expenses_sheet, _expense_to_row, expense)

    def update_expense(self, expense: ExpenseRecord) -> bool:
        return self._update(self._client.get_expenses_sheet, _expense_to_row, expense)

    def delete_expense(self, expense_id: int, user_id: int) -> bool:
        return self._delete(self._client.get_expenses_sheet, expense_id, user_id)

    def insert_income(self, income: IncomeRecord) -> IncomeRecord:
        return self._insert(self._client.get_incomes_sheet, _income_to_row, income)

    def update_income(self, income: IncomeRecord) -> bool:
        return self._update(self._client.get_incomes_sheet, _income_to_row, income)

    def delete_income(self, income_id: int, user_id: int) -> bool:
        return self._delete(self._client.get_incomes_sheet, income_id, user_id)

    def insert_budget(self, budget: BudgetRecord) -> BudgetRecord:
        return self._insert(self._client.get_budgets_sheet, _budget_to_row, budget)

    def update_budget(self, budget: BudgetRecord) -> bool:
        return self._update(self._client.get_budgets_sheet, _budget_to_row, budget)

    def delete_budget(self, budget_id: int, user_id: int) -> bool:
        return self._delete(self._client.get_budgets_sheet, budget_id, user_id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _data_rows(sheet: gspread.Worksheet) -> list[list]:
        """All non-empty rows below the header."""
        return [row for row in sheet.get_all_values()[1:] if row and row[0]]

    @staticmethod
    def _next_id(rows: list[list]) -> int:
        return max((int(row[0]) for row in rows), default=0) + 1

    @surfaces_as_unavailable("read records")
    @retry_transient
    def _find_owned(
        self,
        get_sheet: Callable[[], gspread.Worksheet],
        from_row: Callable[[list], RecordT],
        user_id: int,
    ) -> list[RecordT]:
        return [
            from_row(row)
            for row in self._data_rows(get_sheet())
            if row[1] == str(user_id)
        ]

    @surfaces_as_unavailable("insert record")
    def _insert(
        self,
        get_sheet: Callable[[], gspread.Worksheet],
        to_row: Callable[[RecordT], list],
        record: RecordT,
    ) -> RecordT:
        sheet = get_sheet()
        stored = record.model_copy(update={"id": self._next_id(self._data_rows(sheet))})
        sheet.append_row(to_row(stored), value_input_option="RAW")
        return stored

    @surfaces_as_unavailable("update record")
    @retry_transient
    def _update(
        self,
        get_sheet: Callable[[], gspread.Worksheet],
        to_row: Callable[[RecordT], list],
        record: RecordT,
    ) -> bool:
        sheet = get_sheet()
        all_rows = sheet.get_all_values()

        # Row 1 is the header
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == str(record.id) and row[1] == str(record.user_id):
                values = to_row(record)
                cells = f"{rowcol_to_a1(idx, 1)}:{rowcol_to_a1(idx, len(values))}"
                sheet.update(range_name=cells, values=[values], value_input_option="RAW")
                return True
        return False

    @surfaces_as_unavailable("delete record")
    def _delete(
        self,
        get_sheet: Callable[[], gspread.Worksheet],
        record_id: int,
        user_id: int,
    ) -> bool:
        sheet = get_sheet()
        all_rows = sheet.get_all_values()

        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == str(record_id) and row[1] == str(user_id):
                sheet.delete_rows(idx)
                return True
        return False

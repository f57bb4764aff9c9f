"""Budget ledger package."""

from pfm.ledger.budget_ledger import BudgetLedger

__all__ = ["BudgetLedger"]

"""User-scoped record stores."""

from expense_tracker.stores.categories import CATEGORIES_COLLECTION, CategoryStore
from expense_tracker.stores.expenses import EXPENSES_COLLECTION, ExpenseStore

__all__ = [
    "CATEGORIES_COLLECTION",
    "EXPENSES_COLLECTION",
    "CategoryStore",
    "ExpenseStore",
]

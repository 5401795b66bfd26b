"""Expense form validation package."""

from expense_tracker.validation.editor import (
    CategoryMode,
    EditorState,
    ExpenseEditor,
    InvalidTransition,
)
from expense_tracker.validation.validator import (
    AMOUNT_INPUT_PATTERN,
    ExpenseForm,
    ExpenseFormValidator,
    unique_categories,
)

__all__ = [
    "AMOUNT_INPUT_PATTERN",
    "CategoryMode",
    "EditorState",
    "ExpenseEditor",
    "ExpenseForm",
    "ExpenseFormValidator",
    "InvalidTransition",
    "unique_categories",
]

"""
Expense editor state machine.

    CLOSED --open_create--> OPEN_CREATE
    CLOSED --open_edit----> OPEN_EDIT (expense)
    OPEN_* --cancel-------> CLOSED
    OPEN_* --save (valid)-> CLOSED

Within an open editor the category picker toggles between
SELECTING_CATEGORY and ENTERING_NEW_CATEGORY. A failed save leaves the
editor open with the user's input intact.
"""

from enum import Enum
from typing import Optional, Union

from expense_tracker.errors import ExpenseTrackerError
from expense_tracker.models.expense import (
    Category,
    DateLike,
    Expense,
    ExpenseFields,
)
from expense_tracker.stores.categories import CategoryStore
from expense_tracker.validation.validator import (
    ExpenseForm,
    ExpenseFormValidator,
    unique_categories,
)


class EditorState(str, Enum):
    CLOSED = "closed"
    OPEN_CREATE = "open_create"
    OPEN_EDIT = "open_edit"


class CategoryMode(str, Enum):
    SELECTING_CATEGORY = "selecting_category"
    ENTERING_NEW_CATEGORY = "entering_new_category"


class InvalidTransition(ExpenseTrackerError):
    """Editor action not allowed in the current state."""
    pass


class ExpenseEditor:
    """Holds the form and drives the create/edit dialog lifecycle."""

    def __init__(self, validator: Optional[ExpenseFormValidator] = None):
        self._validator = validator or ExpenseFormValidator()
        self.state = EditorState.CLOSED
        self.category_mode = CategoryMode.SELECTING_CATEGORY
        self.form = ExpenseForm()
        self.editing: Optional[Expense] = None

    @property
    def is_open(self) -> bool:
        return self.state != EditorState.CLOSED

    def _require_open(self) -> None:
        if not self.is_open:
            raise InvalidTransition("Editor is closed")

    def _require_closed(self) -> None:
        if self.is_open:
            raise InvalidTransition("Editor is already open")

    def _reset(self) -> None:
        self.form = ExpenseForm()
        self.category_mode = CategoryMode.SELECTING_CATEGORY
        self.editing = None

    def open_create(self) -> None:
        self._require_closed()
        self._reset()
        self.state = EditorState.OPEN_CREATE

    def open_edit(self, expense: Expense, candidates: list[Category]) -> None:
        """Open prefilled with `expense`, selecting the category with its name."""
        self._require_closed()
        self._reset()
        category_id = next(
            (c.id for c in unique_categories(candidates) if c.name == expense.category),
            "",
        )
        self.form = ExpenseForm(
            title=expense.title,
            amount=f"{expense.amount:f}".rstrip("0").rstrip("."),
            category_id=category_id,
            notes=expense.notes,
        )
        self.editing = expense
        self.state = EditorState.OPEN_EDIT

    def type_amount(self, candidate: str) -> str:
        """Apply one edit to the amount field through the entry filter."""
        self._require_open()
        self.form.amount = self._validator.accept_amount_input(self.form.amount, candidate)
        return self.form.amount

    def toggle_new_category(self) -> CategoryMode:
        self._require_open()
        if self.category_mode == CategoryMode.SELECTING_CATEGORY:
            self.category_mode = CategoryMode.ENTERING_NEW_CATEGORY
        else:
            self.category_mode = CategoryMode.SELECTING_CATEGORY
            self.form.new_category = ""
        return self.category_mode

    async def submit_new_category(
        self,
        category_store: CategoryStore,
        user_id: str,
    ) -> Category:
        """Create the typed category and go back to selecting."""
        self._require_open()
        if self.category_mode != CategoryMode.ENTERING_NEW_CATEGORY:
            raise InvalidTransition("Not entering a new category")
        category = await self._validator.add_category_inline(
            category_store, user_id, self.form.new_category
        )
        self.form.new_category = ""
        self.category_mode = CategoryMode.SELECTING_CATEGORY
        return category

    def cancel(self) -> None:
        self._require_open()
        self._reset()
        self.state = EditorState.CLOSED

    def save(
        self,
        candidates: list[Category],
        selected_date: DateLike,
    ) -> Union[ExpenseFields, Expense]:
        """
        Validate the form and close.

        Raises:
            ValidationError: Input rejected; the editor stays open
        """
        self._require_open()
        payload = self._validator.validate(
            self.form,
            candidates,
            selected_date,
            editing=self.editing,
        )
        self._reset()
        self.state = EditorState.CLOSED
        return payload

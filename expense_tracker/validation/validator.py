"""
Expense Form Validation

DESIGN DECISION: Validation happens in two places:

ENTRY TIME - AMOUNT FILTER:
- Each keystroke in the amount field is checked against
  "digits, with at most one decimal point"
- Non-conforming input is rejected immediately (the field keeps its
  previous value), so "-" or letters never make it into the form

SUBMIT TIME - FIELD CHECKS:
- Title present after trimming
- Amount parses to a finite number greater than zero
- Selected category exists in the candidates the form was showing

IMPORTANT: The validator never touches the document store. Invalid input
raises ValidationError before any store call is attempted.
"""

import math
import re
from typing import Optional, Union

from pydantic import BaseModel, Field

from expense_tracker.errors import ValidationError
from expense_tracker.models.expense import (
    Category,
    DateLike,
    Expense,
    ExpenseFields,
    format_date,
)
from expense_tracker.stores.categories import CategoryStore


AMOUNT_INPUT_PATTERN = re.compile(r"^\d*\.?\d*$")


class ExpenseForm(BaseModel):
    """Raw strings as the user typed them."""

    title: str = ""
    amount: str = ""
    category_id: str = ""
    notes: str = ""
    new_category: str = Field(
        default="",
        description="Inline 'add category' input"
    )


def unique_categories(categories: list[Category]) -> list[Category]:
    """
    Drop categories whose name was already seen, keeping the first.

    The store allows same-named categories; the form only offers one.
    """
    seen: set[str] = set()
    unique = []
    for category in categories:
        if category.name in seen:
            continue
        seen.add(category.name)
        unique.append(category)
    return unique


class ExpenseFormValidator:
    """Validates and normalizes expense form input."""

    @staticmethod
    def accept_amount_input(current: str, candidate: str) -> str:
        """
        Entry-time filter for the amount field.

        Returns the new field value: `candidate` if it is empty or
        digits with at most one decimal point, else `current` unchanged.
        """
        if candidate == "" or AMOUNT_INPUT_PATTERN.match(candidate):
            return candidate
        return current

    @staticmethod
    def validate_title(raw: str) -> str:
        title = (raw or "").strip()
        if not title:
            raise ValidationError("title required", field="title")
        return title

    @staticmethod
    def validate_amount(raw: str) -> float:
        try:
            amount = float((raw or "").strip())
        except ValueError:
            raise ValidationError("invalid amount", field="amount")
        if not math.isfinite(amount) or amount <= 0:
            raise ValidationError("invalid amount", field="amount")
        return amount

    @staticmethod
    def resolve_category(category_id: str, candidates: list[Category]) -> str:
        """Map the selected category id to its name."""
        if not category_id:
            raise ValidationError("category required", field="category")
        for category in unique_categories(candidates):
            if category.id == category_id:
                return category.name
        raise ValidationError("category not found", field="category")

    def validate(
        self,
        form: ExpenseForm,
        candidates: list[Category],
        selected_date: DateLike,
        editing: Optional[Expense] = None,
    ) -> Union[ExpenseFields, Expense]:
        """
        Run every submit-time check and build the normalized record.

        Args:
            form: Raw form input
            candidates: Categories currently loaded in the form
            selected_date: The day the expense is recorded against
            editing: The expense being edited, if any

        Returns:
            ExpenseFields for a new expense, or an Expense carrying the
            edited expense's id and owner
        """
        normalized = {
            "title": self.validate_title(form.title),
            "amount": self.validate_amount(form.amount),
            "category": self.resolve_category(form.category_id, candidates),
            "notes": (form.notes or "").strip(),
            "date": format_date(selected_date),
        }

        if editing is not None:
            return Expense(id=editing.id, user_id=editing.user_id, **normalized)
        return ExpenseFields(**normalized)

    @staticmethod
    async def add_category_inline(
        category_store: CategoryStore,
        user_id: str,
        raw_name: str,
    ) -> Category:
        """Validate the inline 'new category' input, then create it."""
        name = (raw_name or "").strip()
        if not name:
            raise ValidationError("category name required", field="new_category")
        return await category_store.add_category(user_id, name)

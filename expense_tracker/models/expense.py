"""
Core Data Models for Expense Tracker

These models define the record shapes persisted in the document store.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Round-trip cleanly to flat field/value records

DESIGN DECISION: Records are stored with camelCase owner field (`userId`)
so existing documents stay readable. Python code uses `user_id` and the
models translate via field aliases.
"""

import re
from datetime import date, datetime, timezone
from typing import Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


DATE_FORMAT_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
INITIALIZED_FLAG_SUFFIX = "initialized_flag"

DateLike = Union[date, datetime, str]


def format_date(value: DateLike) -> str:
    """
    Format a calendar day as YYYY-MM-DD.

    Datetimes lose their time component, so two expenses on the same
    day at different times share a date key. Strings must already be
    in YYYY-MM-DD form and name a real calendar day.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and re.match(DATE_FORMAT_PATTERN, value):
        # Rejects e.g. 2024-02-30
        date.fromisoformat(value)
        return value
    raise ValueError(f"Invalid date: {value!r}. Expected YYYY-MM-DD")


def format_currency(amount: float, symbol: str = "₹") -> str:
    """Render an amount the way the daily summary shows it."""
    return f"{symbol}{amount:,.2f}"


def marker_id(user_id: str) -> str:
    """Deterministic record id of a user's initialization marker."""
    return f"{user_id}_{INITIALIZED_FLAG_SUFFIX}"


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ExpenseFields(BaseModel):
    """
    The user-editable part of an expense.

    This is the creation payload: the store assigns `id` and stamps
    `userId` itself.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    title: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount in currency units"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category name at save time (not a foreign key)"
    )
    notes: str = Field(
        default="",
        description="Optional free text"
    )
    date: str = Field(
        ...,
        pattern=DATE_FORMAT_PATTERN,
        description="Calendar day as YYYY-MM-DD"
    )

    @field_validator('notes', mode='before')
    @classmethod
    def none_notes_to_empty(cls, v):
        return "" if v is None else v

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date(cls, v):
        """Accept date/datetime objects and format them."""
        return format_date(v)

    def to_record(self) -> dict:
        """Flat record for the document store."""
        return self.model_dump(by_alias=True, exclude={"id"})


class Expense(ExpenseFields):
    """
    A persisted expense.

    `id` is assigned by the store on creation and never changes.
    `user_id` is the owner and is never changed after creation.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque record id"
    )
    user_id: str = Field(
        ...,
        alias="userId",
        min_length=1,
        description="Owner identifier"
    )

    @property
    def payload(self) -> ExpenseFields:
        """The mutable payload, without id and owner."""
        return ExpenseFields.model_validate(
            self.model_dump(exclude={"id", "user_id"})
        )

    @classmethod
    def from_record(cls, record: dict) -> "Expense":
        return cls.model_validate(record)


# =============================================================================
# CATEGORY MODELS
# =============================================================================

class Category(BaseModel):
    """
    A user-defined expense category.

    Name uniqueness is NOT enforced here; consumers de-duplicate by name.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    user_id: str = Field(..., alias="userId", min_length=1)

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"id"})

    @classmethod
    def from_record(cls, record: dict) -> "Category":
        return cls.model_validate(record)


class InitializationMarker(BaseModel):
    """
    Sentinel record making default-category seeding idempotent.

    Stored in the categories collection under `marker_id(user_id)`.
    It carries no `userId` field, so category queries never return it.
    """

    initialized: bool = True
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="When seeding finished (ISO-8601)"
    )


# =============================================================================
# AGGREGATION MODELS
# =============================================================================

class DailySummary(BaseModel):
    """Per-day figure shown above the expense list."""

    date: str = Field(..., pattern=DATE_FORMAT_PATTERN)
    total: float = Field(default=0, ge=0)
    count: int = Field(default=0, ge=0)

    @property
    def is_today(self) -> bool:
        return self.date == date.today().isoformat()

    def formatted_total(self, symbol: str = "₹") -> str:
        return format_currency(self.total, symbol)

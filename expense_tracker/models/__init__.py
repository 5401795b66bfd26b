"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All records flowing to and from the document store conform to these schemas.
"""

from expense_tracker.models.expense import (
    DATE_FORMAT_PATTERN,
    Category,
    DailySummary,
    DateLike,
    Expense,
    ExpenseFields,
    InitializationMarker,
    format_currency,
    format_date,
    marker_id,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "DATE_FORMAT_PATTERN",
    "Category",
    "DailySummary",
    "DateLike",
    "Expense",
    "ExpenseFields",
    "InitializationMarker",
    "format_currency",
    "format_date",
    "marker_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

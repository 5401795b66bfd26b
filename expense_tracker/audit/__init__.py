"""Audit logging package."""

from expense_tracker.audit.logger import AUDIT_COLLECTION, AuditLogger, create_correlation_id

__all__ = ["AUDIT_COLLECTION", "AuditLogger", "create_correlation_id"]

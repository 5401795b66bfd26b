"""
Audit Logger

DESIGN DECISION: Every mutation of a user's records is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. A record of refused operations

The audit logger:
- Is async so it can share the stores' call path
- Gracefully handles failures (doesn't break the operation if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder
from expense_tracker.services.storage import DocumentStoreInterface


AUDIT_COLLECTION = "audit_log"


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The document store's audit collection (for persistence)
    """

    def __init__(
        self,
        storage: Optional[DocumentStoreInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Document store for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                await self._storage.create(AUDIT_COLLECTION, event.to_record())
                return True
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_categories_seeded(
        self,
        user_id: str,
        names: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.categories_seeded(
            user_id=user_id,
            names=names,
            correlation_id=correlation_id,
        ))

    async def log_category_added(self, user_id: str, category_id: str, name: str) -> None:
        await self.log(AuditEventBuilder.category_added(
            user_id=user_id,
            category_id=category_id,
            name=name,
        ))

    async def log_category_deleted(self, user_id: str, category_id: str) -> None:
        await self.log(AuditEventBuilder.category_deleted(
            user_id=user_id,
            category_id=category_id,
        ))

    async def log_expense_created(
        self,
        user_id: str,
        expense_id: str,
        amount: float,
        date: str,
    ) -> None:
        await self.log(AuditEventBuilder.expense_created(
            user_id=user_id,
            expense_id=expense_id,
            amount=amount,
            date=date,
        ))

    async def log_expense_updated(
        self,
        user_id: str,
        expense_id: str,
        amount: float,
        date: str,
    ) -> None:
        await self.log(AuditEventBuilder.expense_updated(
            user_id=user_id,
            expense_id=expense_id,
            amount=amount,
            date=date,
        ))

    async def log_expense_deleted(self, user_id: str, expense_id: str) -> None:
        await self.log(AuditEventBuilder.expense_deleted(
            user_id=user_id,
            expense_id=expense_id,
        ))

    async def log_authorization_refused(
        self,
        user_id: str,
        entity_type: str,
        entity_id: str,
        owner_id: str,
    ) -> None:
        """Log a refused mutation of another user's record."""
        await self.log(AuditEventBuilder.authorization_refused(
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            owner_id=owner_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            user_id=user_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step operation (e.g., seeding).
    Pass it through all subsequent events.
    """
    return uuid4()

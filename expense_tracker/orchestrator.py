"""
Main Orchestrator for Expense Tracker

This module ties the components together at the UI boundary:
1. Tracks who is signed in (via the identity provider's session events)
2. Passes that user id explicitly into the stores
3. Audits collaborator failures before surfacing them

DESIGN DECISION: The stores never look up the session themselves.
The user id is read once here and handed down, so the stores can be
tested with plain arguments and a fake document store.
"""

from typing import Awaitable, Optional, TypeVar, Union

import structlog

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings
from expense_tracker.errors import CollaboratorError, NotAuthenticated
from expense_tracker.models.expense import (
    Category,
    DailySummary,
    DateLike,
    Expense,
    ExpenseFields,
)
from expense_tracker.services.identity import (
    IdentityProviderInterface,
    LocalSessionProvider,
)
from expense_tracker.services.storage import (
    DocumentStoreInterface,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
    InMemoryDocumentStore,
)
from expense_tracker.stores import CategoryStore, ExpenseStore
from expense_tracker.validation import ExpenseFormValidator


T = TypeVar("T")

logger = structlog.get_logger(__name__)


class ExpenseTracker:
    """
    Session-bound facade over the category and expense stores.

    Every call acts on behalf of whoever is signed in at call time.
    """

    def __init__(
        self,
        identity: IdentityProviderInterface,
        category_store: CategoryStore,
        expense_store: ExpenseStore,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[ExpenseFormValidator] = None,
        currency_symbol: str = "₹",
    ):
        self._identity = identity
        self._categories = category_store
        self._expenses = expense_store
        self._audit_logger = audit_logger
        self._validator = validator or ExpenseFormValidator()
        self._currency_symbol = currency_symbol

        self._user_id: Optional[str] = identity.get_current_user_id()
        self._unsubscribe = identity.subscribe_to_session_changes(self._on_session_change)

    def _on_session_change(self, user_id: Optional[str]) -> None:
        if user_id != self._user_id:
            logger.info("session_changed", signed_in=user_id is not None)
        self._user_id = user_id

    @property
    def current_user_id(self) -> Optional[str]:
        return self._user_id

    def _require_user(self) -> str:
        if not self._user_id:
            raise NotAuthenticated()
        return self._user_id

    async def _run(self, operation: str, call: Awaitable[T]) -> T:
        """Await a store call, auditing collaborator failures before re-raising."""
        try:
            return await call
        except CollaboratorError as e:
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type=operation,
                    error_message=str(e),
                    user_id=self._user_id,
                )
            raise

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def categories(self) -> list[Category]:
        user_id = self._require_user()
        return await self._run(
            "list_categories",
            self._categories.list_categories(user_id),
        )

    async def add_category(self, name: str) -> Category:
        user_id = self._require_user()
        return await self._run(
            "add_category",
            self._validator.add_category_inline(self._categories, user_id, name),
        )

    async def delete_category(self, category_id: str) -> bool:
        user_id = self._require_user()
        return await self._run(
            "delete_category",
            self._categories.delete_category(user_id, category_id),
        )

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    async def all_expenses(self) -> list[Expense]:
        user_id = self._require_user()
        return await self._run(
            "list_expenses_for_user",
            self._expenses.list_expenses_for_user(user_id),
        )

    async def expenses_for_date(self, day: DateLike) -> list[Expense]:
        user_id = self._require_user()
        return await self._run(
            "list_expenses_for_date",
            self._expenses.list_expenses_for_date(user_id, day),
        )

    async def total_for_date(self, day: DateLike) -> float:
        user_id = self._require_user()
        return await self._run(
            "total_for_date",
            self._expenses.total_for_date(user_id, day),
        )

    async def summary_for_date(self, day: DateLike) -> DailySummary:
        user_id = self._require_user()
        return await self._run(
            "daily_summary",
            self._expenses.daily_summary(user_id, day),
        )

    async def formatted_total_for_date(self, day: DateLike) -> str:
        """The day's total as the summary card shows it, e.g. '₹1,234.50'."""
        summary = await self.summary_for_date(day)
        return summary.formatted_total(self._currency_symbol)

    async def save_expense(self, payload: Union[ExpenseFields, Expense]) -> Expense:
        """
        Persist what the editor produced.

        An Expense (carries id and owner) is an update; bare
        ExpenseFields is a new expense.
        """
        user_id = self._require_user()
        if isinstance(payload, Expense):
            return await self._run(
                "update_expense",
                self._expenses.update_expense(user_id, payload),
            )
        return await self._run(
            "create_expense",
            self._expenses.create_expense(user_id, payload),
        )

    async def delete_expense(self, expense_id: str) -> bool:
        user_id = self._require_user()
        return await self._run(
            "delete_expense",
            self._expenses.delete_expense(user_id, expense_id),
        )

    def close(self) -> None:
        """Stop listening to session changes."""
        self._unsubscribe()


def create_app_components(
    identity: Optional[IdentityProviderInterface] = None,
    use_storage: bool = True,
) -> tuple[ExpenseTracker, DocumentStoreInterface]:
    """
    Factory function to create all application components.

    Args:
        identity: Identity provider. Defaults to a local session.
        use_storage: Whether to use Google Sheets storage.
                    Set to False to keep everything in memory.

    Returns:
        (tracker, document_store)
    """
    storage: DocumentStoreInterface
    if use_storage:
        try:
            storage = GoogleSheetsDocumentStore(GoogleSheetsClient())
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            storage = InMemoryDocumentStore()
    else:
        storage = InMemoryDocumentStore()

    app_settings = get_settings().app
    audit_logger = AuditLogger(storage)
    tracker = ExpenseTracker(
        identity=identity or LocalSessionProvider(),
        category_store=CategoryStore(
            storage,
            audit_logger,
            default_names=app_settings.default_categories_list,
        ),
        expense_store=ExpenseStore(storage, audit_logger),
        audit_logger=audit_logger,
        currency_symbol=app_settings.currency_symbol,
    )
    return tracker, storage

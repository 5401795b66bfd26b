"""
Expense Store

Owns expense records scoped to a user and a calendar date.

Date lookups are exact string matches on the YYYY-MM-DD key; there
are no range queries and no timezone normalization. Totals are always
summed from the listed records, never kept as a separate counter, so a
total can't disagree with the list it describes.
"""

from typing import Optional

from expense_tracker.audit import AuditLogger
from expense_tracker.errors import NotAuthenticated, NotAuthorized
from expense_tracker.models.expense import (
    DailySummary,
    DateLike,
    Expense,
    ExpenseFields,
    format_date,
)
from expense_tracker.services.storage import DocumentStoreInterface, NotFoundError


EXPENSES_COLLECTION = "expenses"


class ExpenseStore:
    """User-scoped expense persistence over the document store."""

    def __init__(
        self,
        storage: DocumentStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit = audit_logger

    async def list_expenses_for_user(self, user_id: str) -> list[Expense]:
        records = await self._storage.query(
            EXPENSES_COLLECTION,
            [("userId", user_id)],
        )
        return [Expense.from_record(record) for record in records]

    async def list_expenses_for_date(self, user_id: str, day: DateLike) -> list[Expense]:
        records = await self._storage.query(
            EXPENSES_COLLECTION,
            [("date", format_date(day)), ("userId", user_id)],
        )
        return [Expense.from_record(record) for record in records]

    async def total_for_date(self, user_id: str, day: DateLike) -> float:
        """Sum of amounts on one day; 0 when there are none."""
        expenses = await self.list_expenses_for_date(user_id, day)
        return sum((expense.amount for expense in expenses), 0)

    async def daily_summary(self, user_id: str, day: DateLike) -> DailySummary:
        expenses = await self.list_expenses_for_date(user_id, day)
        return DailySummary(
            date=format_date(day),
            total=sum((expense.amount for expense in expenses), 0),
            count=len(expenses),
        )

    async def create_expense(
        self,
        user_id: Optional[str],
        fields: ExpenseFields,
    ) -> Expense:
        """
        Persist a new expense owned by `user_id`.

        Raises:
            NotAuthenticated: If nobody is signed in
        """
        if not user_id:
            raise NotAuthenticated()

        record = fields.to_record()
        record["userId"] = user_id
        expense_id = await self._storage.create(EXPENSES_COLLECTION, record)

        if self._audit:
            await self._audit.log_expense_created(
                user_id, expense_id, fields.amount, fields.date
            )
        return Expense.model_validate({**record, "id": expense_id})

    async def update_expense(self, user_id: Optional[str], expense: Expense) -> Expense:
        """
        Overwrite every field of an expense except its id and owner.

        Ownership is checked against the stored record, not the payload.

        Raises:
            NotAuthenticated: If nobody is signed in
            NotAuthorized: If the expense belongs to someone else
            NotFoundError: If the expense no longer exists
        """
        if not user_id:
            raise NotAuthenticated()

        record = await self._storage.get(EXPENSES_COLLECTION, expense.id)
        if record is None:
            raise NotFoundError(f"Record not found: {EXPENSES_COLLECTION}/{expense.id}")
        owner_id = record.get("userId")
        if owner_id != user_id or expense.user_id != user_id:
            await self._refuse(user_id, expense.id, owner_id or "")
            raise NotAuthorized("Not authorized to update this expense")

        changes = expense.to_record()
        changes.pop("userId", None)
        await self._storage.update(EXPENSES_COLLECTION, expense.id, changes)

        if self._audit:
            await self._audit.log_expense_updated(
                user_id, expense.id, expense.amount, expense.date
            )
        return expense

    async def delete_expense(self, user_id: Optional[str], expense_id: str) -> bool:
        """
        Delete one of the user's expenses.

        Returns False if the expense doesn't exist.

        Raises:
            NotAuthenticated: If nobody is signed in
            NotAuthorized: If the expense belongs to someone else
        """
        if not user_id:
            raise NotAuthenticated()

        record = await self._storage.get(EXPENSES_COLLECTION, expense_id)
        if record is None:
            return False
        owner_id = record.get("userId")
        if owner_id != user_id:
            await self._refuse(user_id, expense_id, owner_id or "")
            raise NotAuthorized("Not authorized to delete this expense")

        await self._storage.delete(EXPENSES_COLLECTION, expense_id)
        if self._audit:
            await self._audit.log_expense_deleted(user_id, expense_id)
        return True

    async def _refuse(self, user_id: str, expense_id: str, owner_id: str) -> None:
        if self._audit:
            await self._audit.log_authorization_refused(
                user_id, "expense", expense_id, owner_id
            )

"""
Category Store

Owns category records scoped to a user and bootstraps the default set
exactly once per user.

Seeding is gated by a marker record written AFTER the defaults. If the
process dies mid-seed, the marker is missing and the next listing seeds
again. Two concurrent first listings can both observe "not initialized"
and seed twice; for a single-user personal tool that is accepted.
"""

from typing import Optional

from expense_tracker.audit import AuditLogger, create_correlation_id
from expense_tracker.config import DEFAULT_CATEGORY_NAMES
from expense_tracker.errors import NotAuthorized, ValidationError
from expense_tracker.models.expense import Category, InitializationMarker, marker_id
from expense_tracker.services.storage import DocumentStoreInterface


CATEGORIES_COLLECTION = "categories"


class CategoryStore:
    """User-scoped category persistence over the document store."""

    def __init__(
        self,
        storage: DocumentStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        default_names: Optional[list[str]] = None,
    ):
        self._storage = storage
        self._audit = audit_logger
        self._default_names = list(default_names or DEFAULT_CATEGORY_NAMES)

    async def is_initialized(self, user_id: str) -> bool:
        marker = await self._storage.get(CATEGORIES_COLLECTION, marker_id(user_id))
        return marker is not None

    async def ensure_defaults_seeded(self, user_id: str) -> bool:
        """
        Create the default categories for a user who has none yet.

        Safe to call on every listing. Returns True if this call seeded.
        """
        if await self.is_initialized(user_id):
            return False

        for name in self._default_names:
            await self._storage.create(
                CATEGORIES_COLLECTION,
                {"name": name, "userId": user_id},
            )

        await self._storage.create(
            CATEGORIES_COLLECTION,
            InitializationMarker().model_dump(),
            record_id=marker_id(user_id),
        )

        if self._audit:
            await self._audit.log_categories_seeded(
                user_id=user_id,
                names=self._default_names,
                correlation_id=create_correlation_id(),
            )
        return True

    async def list_categories(self, user_id: str) -> list[Category]:
        """All of a user's categories, seeding the defaults first if needed."""
        await self.ensure_defaults_seeded(user_id)
        records = await self._storage.query(
            CATEGORIES_COLLECTION,
            [("userId", user_id)],
        )
        return [Category.from_record(record) for record in records]

    async def add_category(self, user_id: str, name: str) -> Category:
        """
        Create a category. Duplicate names are allowed here;
        consumers de-duplicate by name.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("category name required", field="name")

        category_id = await self._storage.create(
            CATEGORIES_COLLECTION,
            {"name": name, "userId": user_id},
        )
        if self._audit:
            await self._audit.log_category_added(user_id, category_id, name)
        return Category(id=category_id, name=name, user_id=user_id)

    async def delete_category(self, user_id: str, category_id: str) -> bool:
        """
        Delete one of the user's categories.

        Expenses keep the category name they were saved with.
        Returns False if the category doesn't exist.
        """
        record = await self._storage.get(CATEGORIES_COLLECTION, category_id)
        if record is None or "userId" not in record:
            # Missing, or the seeding marker
            return False

        owner_id = record["userId"]
        if owner_id != user_id:
            if self._audit:
                await self._audit.log_authorization_refused(
                    user_id, "category", category_id, owner_id
                )
            raise NotAuthorized("Not authorized to delete this category")

        await self._storage.delete(CATEGORIES_COLLECTION, category_id)
        if self._audit:
            await self._audit.log_category_deleted(user_id, category_id)
        return True

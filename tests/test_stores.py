"""
Tests for the category and expense stores.

Async store calls are driven with asyncio.run against the in-memory
document store.
"""

import asyncio

import pytest

from expense_tracker.audit import AUDIT_COLLECTION, AuditLogger
from expense_tracker.config import DEFAULT_CATEGORY_NAMES
from expense_tracker.errors import NotAuthenticated, NotAuthorized, ValidationError
from expense_tracker.models.expense import Expense, ExpenseFields, marker_id
from expense_tracker.services.storage import InMemoryDocumentStore, NotFoundError
from expense_tracker.stores import (
    CATEGORIES_COLLECTION,
    EXPENSES_COLLECTION,
    CategoryStore,
    ExpenseStore,
)


def run(coro):
    return asyncio.run(coro)


def coffee(**overrides) -> ExpenseFields:
    data = {
        "title": "Coffee",
        "amount": 4.5,
        "category": "Food",
        "notes": "",
        "date": "2024-03-01",
    }
    data.update(overrides)
    return ExpenseFields(**data)


@pytest.fixture
def storage():
    return InMemoryDocumentStore()


@pytest.fixture
def categories(storage):
    return CategoryStore(storage, AuditLogger(storage))


@pytest.fixture
def expenses(storage):
    return ExpenseStore(storage, AuditLogger(storage))


class TestCategorySeeding:
    """Tests for default-category bootstrap."""

    def test_fresh_user_gets_seven_defaults(self, categories):
        listed = run(categories.list_categories("u1"))
        assert len(listed) == 7
        assert {c.name for c in listed} == {
            "Food", "Transportation", "Entertainment", "Shopping",
            "Utilities", "Health", "Other",
        }
        assert all(c.user_id == "u1" for c in listed)

    def test_seeding_twice_is_idempotent(self, categories):
        assert run(categories.ensure_defaults_seeded("u1")) is True
        assert run(categories.ensure_defaults_seeded("u1")) is False
        assert len(run(categories.list_categories("u1"))) == 7

    def test_repeated_listing_does_not_reseed(self, categories):
        for _ in range(3):
            listed = run(categories.list_categories("u1"))
        assert len(listed) == 7

    def test_marker_written_after_seeding(self, storage, categories):
        run(categories.ensure_defaults_seeded("u1"))
        marker = run(storage.get(CATEGORIES_COLLECTION, marker_id("u1")))
        assert marker["initialized"] is True
        assert "timestamp" in marker

    def test_marker_is_not_listed_as_category(self, categories):
        listed = run(categories.list_categories("u1"))
        assert all(c.id != marker_id("u1") for c in listed)

    def test_seeding_is_per_user(self, categories):
        run(categories.list_categories("u1"))
        listed = run(categories.list_categories("u2"))
        assert len(listed) == 7
        assert all(c.user_id == "u2" for c in listed)

    def test_partial_seed_without_marker_seeds_again(self, storage, categories):
        """A crash before the marker write is tolerated by re-seeding."""
        run(storage.create(CATEGORIES_COLLECTION, {"name": "Food", "userId": "u1"}))
        listed = run(categories.list_categories("u1"))
        assert len(listed) == 8

    def test_custom_default_names(self, storage):
        store = CategoryStore(storage, default_names=["Rent", "Fuel"])
        listed = run(store.list_categories("u1"))
        assert [c.name for c in listed] == ["Rent", "Fuel"]

    def test_default_names_constant(self):
        assert len(DEFAULT_CATEGORY_NAMES) == 7

    def test_seeding_is_audited(self, storage, categories):
        run(categories.ensure_defaults_seeded("u1"))
        events = run(storage.query(AUDIT_COLLECTION, [("eventType", "categories_seeded")]))
        assert len(events) == 1


class TestCategoryMutations:
    """Tests for adding and deleting categories."""

    def test_add_category(self, categories):
        added = run(categories.add_category("u1", "  Pets  "))
        assert added.name == "Pets"
        listed = run(categories.list_categories("u1"))
        assert "Pets" in [c.name for c in listed]

    def test_add_category_rejects_blank(self, categories):
        with pytest.raises(ValidationError, match="category name required"):
            run(categories.add_category("u1", "   "))

    def test_add_category_long_name(self, storage, categories):
        added = run(categories.add_category("u1", "c" * 600))
        assert len(added.name) == 600
        events = run(storage.query(AUDIT_COLLECTION, [("eventType", "category_added")]))
        assert len(events) == 1

    def test_add_category_allows_duplicates(self, categories):
        run(categories.list_categories("u1"))
        run(categories.add_category("u1", "Food"))
        listed = run(categories.list_categories("u1"))
        assert [c.name for c in listed].count("Food") == 2

    def test_delete_own_category(self, categories):
        added = run(categories.add_category("u1", "Pets"))
        assert run(categories.delete_category("u1", added.id)) is True
        names = [c.name for c in run(categories.list_categories("u1"))]
        assert "Pets" not in names

    def test_delete_missing_category(self, categories):
        assert run(categories.delete_category("u1", "nope")) is False

    def test_delete_refuses_other_users_category(self, categories):
        added = run(categories.add_category("u1", "Pets"))
        with pytest.raises(NotAuthorized):
            run(categories.delete_category("u2", added.id))
        names = [c.name for c in run(categories.list_categories("u1"))]
        assert "Pets" in names

    def test_delete_ignores_marker(self, storage, categories):
        run(categories.ensure_defaults_seeded("u1"))
        assert run(categories.delete_category("u1", marker_id("u1"))) is False
        assert run(categories.is_initialized("u1")) is True


class TestExpenseQueries:
    """Tests for user- and date-scoped listing and totals."""

    def test_create_then_list_for_date(self, expenses):
        created = run(expenses.create_expense("u1", coffee()))
        listed = run(expenses.list_expenses_for_date("u1", "2024-03-01"))

        assert len(listed) == 1
        expense = listed[0]
        assert expense.id == created.id
        assert expense.user_id == "u1"
        assert expense.payload == coffee()

    def test_list_for_date_is_exact_match(self, expenses):
        run(expenses.create_expense("u1", coffee(date="2024-03-01")))
        run(expenses.create_expense("u1", coffee(date="2024-03-02")))
        assert len(run(expenses.list_expenses_for_date("u1", "2024-03-02"))) == 1
        assert run(expenses.list_expenses_for_date("u1", "2024-03-03")) == []

    def test_list_for_user_is_scoped(self, expenses):
        run(expenses.create_expense("u1", coffee()))
        run(expenses.create_expense("u2", coffee()))
        listed = run(expenses.list_expenses_for_user("u1"))
        assert len(listed) == 1
        assert listed[0].user_id == "u1"

    def test_total_for_date(self, expenses):
        run(expenses.create_expense("u1", coffee(amount=4.5)))
        run(expenses.create_expense("u1", coffee(amount=10)))
        run(expenses.create_expense("u1", coffee(amount=99, date="2024-03-02")))
        run(expenses.create_expense("u2", coffee(amount=50)))
        assert run(expenses.total_for_date("u1", "2024-03-01")) == pytest.approx(14.5)

    def test_total_with_no_expenses_is_zero(self, expenses):
        assert run(expenses.total_for_date("u1", "2024-03-01")) == 0

    def test_total_reflects_deletions(self, expenses):
        first = run(expenses.create_expense("u1", coffee(amount=4.5)))
        run(expenses.create_expense("u1", coffee(amount=3)))
        run(expenses.delete_expense("u1", first.id))
        assert run(expenses.total_for_date("u1", "2024-03-01")) == pytest.approx(3)

    def test_daily_summary(self, expenses):
        run(expenses.create_expense("u1", coffee(amount=4.5)))
        run(expenses.create_expense("u1", coffee(amount=5.5)))
        summary = run(expenses.daily_summary("u1", "2024-03-01"))
        assert summary.total == pytest.approx(10)
        assert summary.count == 2
        assert summary.date == "2024-03-01"


class TestExpenseMutations:
    """Tests for create/update/delete ownership rules."""

    def test_create_requires_user(self, expenses):
        with pytest.raises(NotAuthenticated):
            run(expenses.create_expense(None, coffee()))

    def test_create_assigns_fresh_ids(self, expenses):
        first = run(expenses.create_expense("u1", coffee()))
        second = run(expenses.create_expense("u1", coffee()))
        assert first.id != second.id

    def test_update_overwrites_fields(self, expenses):
        created = run(expenses.create_expense("u1", coffee()))
        changed = created.model_copy(update={"title": "Latte", "amount": 5.0})
        run(expenses.update_expense("u1", changed))

        listed = run(expenses.list_expenses_for_date("u1", "2024-03-01"))
        assert listed[0].title == "Latte"
        assert listed[0].amount == 5.0
        assert listed[0].id == created.id

    def test_update_requires_user(self, expenses):
        created = run(expenses.create_expense("u1", coffee()))
        with pytest.raises(NotAuthenticated):
            run(expenses.update_expense(None, created))

    def test_update_refuses_other_owner(self, storage, expenses):
        created = run(expenses.create_expense("u1", coffee()))
        changed = created.model_copy(update={"amount": 1000.0})

        with pytest.raises(NotAuthorized):
            run(expenses.update_expense("u2", changed))

        stored = run(storage.get(EXPENSES_COLLECTION, created.id))
        assert stored["amount"] == 4.5
        refused = run(storage.query(AUDIT_COLLECTION, [("eventType", "authorization_refused")]))
        assert len(refused) == 1

    def test_update_refuses_forged_owner(self, storage, expenses):
        """Claiming ownership in the payload doesn't override the stored owner."""
        victim = run(expenses.create_expense("u1", coffee()))
        forged = victim.model_copy(update={"user_id": "u2", "amount": 999.0})

        with pytest.raises(NotAuthorized):
            run(expenses.update_expense("u2", forged))

        stored = run(storage.get(EXPENSES_COLLECTION, victim.id))
        assert stored["userId"] == "u1"
        assert stored["amount"] == 4.5

    def test_update_never_changes_owner(self, storage, expenses):
        created = run(expenses.create_expense("u1", coffee()))
        run(expenses.update_expense("u1", created.model_copy(update={"title": "Latte"})))
        stored = run(storage.get(EXPENSES_COLLECTION, created.id))
        assert stored["userId"] == "u1"
        assert stored["title"] == "Latte"

    def test_update_missing_expense(self, expenses):
        ghost = Expense(id="ghost", user_id="u1", **coffee().model_dump())
        with pytest.raises(NotFoundError):
            run(expenses.update_expense("u1", ghost))

    def test_delete_own_expense(self, expenses):
        created = run(expenses.create_expense("u1", coffee()))
        assert run(expenses.delete_expense("u1", created.id)) is True
        assert run(expenses.list_expenses_for_user("u1")) == []

    def test_delete_missing_expense(self, expenses):
        assert run(expenses.delete_expense("u1", "nope")) is False

    def test_delete_refuses_other_owner(self, expenses):
        created = run(expenses.create_expense("u1", coffee()))
        with pytest.raises(NotAuthorized):
            run(expenses.delete_expense("u2", created.id))
        assert len(run(expenses.list_expenses_for_user("u1"))) == 1

    def test_delete_requires_user(self, expenses):
        with pytest.raises(NotAuthenticated):
            run(expenses.delete_expense(None, "e1"))


class TestStoresWithoutAudit:
    """Stores work with no audit logger configured."""

    def test_expense_round_trip(self, storage):
        store = ExpenseStore(storage)
        run(store.create_expense("u1", coffee()))
        assert len(run(store.list_expenses_for_user("u1"))) == 1
        assert run(storage.query(AUDIT_COLLECTION, [])) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

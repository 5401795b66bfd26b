"""
Tests for the session-bound facade and the identity provider.
"""

import asyncio

import pytest

from expense_tracker.audit import AUDIT_COLLECTION, AuditLogger
from expense_tracker.errors import NotAuthenticated, NotAuthorized, ValidationError
from expense_tracker.models.expense import ExpenseFields
from expense_tracker.orchestrator import ExpenseTracker, create_app_components
from expense_tracker.services.identity import (
    AuthUser,
    IdentityError,
    LocalSessionProvider,
)
from expense_tracker.services.storage import InMemoryDocumentStore, StorageError
from expense_tracker.stores import CategoryStore, ExpenseStore
from expense_tracker.validation import ExpenseEditor


def run(coro):
    return asyncio.run(coro)


class FailingStore(InMemoryDocumentStore):
    """Document store whose queries fail, as a backend outage would."""

    async def query(self, collection, filters):
        if collection == AUDIT_COLLECTION:
            return await super().query(collection, filters)
        raise StorageError("backend unavailable")


def make_tracker(storage=None, identity=None):
    storage = storage or InMemoryDocumentStore()
    identity = identity or LocalSessionProvider()
    audit_logger = AuditLogger(storage)
    tracker = ExpenseTracker(
        identity=identity,
        category_store=CategoryStore(storage, audit_logger),
        expense_store=ExpenseStore(storage, audit_logger),
        audit_logger=audit_logger,
    )
    return tracker, identity, storage


class TestLocalSessionProvider:
    """Tests for the in-process identity provider."""

    def test_no_user_by_default(self):
        assert LocalSessionProvider().get_current_user_id() is None

    def test_subscribers_see_current_state_and_changes(self):
        identity = LocalSessionProvider()
        seen = []
        unsubscribe = identity.subscribe_to_session_changes(seen.append)

        identity.sign_in(AuthUser(uid="u1", email="a@example.com"))
        identity.sign_out()
        unsubscribe()
        identity.sign_in(AuthUser(uid="u2"))

        assert seen == [None, "u1", None]

    def test_second_user_cannot_sign_in_over_first(self):
        identity = LocalSessionProvider(AuthUser(uid="u1"))
        with pytest.raises(IdentityError):
            identity.sign_in(AuthUser(uid="u2"))

    def test_greeting_name_falls_back(self):
        assert AuthUser(uid="u1", display_name="Asha").greeting_name == "Asha"
        assert AuthUser(uid="u1", email="a@example.com").greeting_name == "a@example.com"
        assert AuthUser(uid="u1").greeting_name == "u1"


class TestExpenseTracker:
    """End-to-end flows through the facade."""

    def test_signed_out_calls_are_refused(self):
        tracker, _, _ = make_tracker()
        with pytest.raises(NotAuthenticated):
            run(tracker.categories())
        with pytest.raises(NotAuthenticated):
            run(tracker.total_for_date("2024-03-01"))

    def test_save_while_signed_out(self):
        tracker, _, _ = make_tracker()
        payload = ExpenseFields(title="Coffee", amount=4.5, category="Food", date="2024-03-01")
        with pytest.raises(NotAuthenticated):
            run(tracker.save_expense(payload))

    def test_delete_while_signed_out(self):
        tracker, _, storage = make_tracker()
        with pytest.raises(NotAuthenticated):
            run(tracker.delete_expense("e1"))
        assert run(storage.query(AUDIT_COLLECTION, [])) == []

    def test_follows_session_changes(self):
        tracker, identity, _ = make_tracker()
        identity.sign_in(AuthUser(uid="u1"))
        assert tracker.current_user_id == "u1"
        identity.sign_out()
        assert tracker.current_user_id is None

    def test_close_stops_following_session(self):
        tracker, identity, _ = make_tracker()
        tracker.close()
        identity.sign_in(AuthUser(uid="u1"))
        assert tracker.current_user_id is None

    def test_editor_to_store_flow(self):
        tracker, identity, _ = make_tracker()
        identity.sign_in(AuthUser(uid="u1"))

        categories = run(tracker.categories())
        food = next(c for c in categories if c.name == "Food")

        editor = ExpenseEditor()
        editor.open_create()
        editor.form.title = "Coffee"
        editor.type_amount("4.5")
        editor.form.category_id = food.id
        created = run(tracker.save_expense(editor.save(categories, "2024-03-01")))

        assert created.user_id == "u1"
        assert run(tracker.total_for_date("2024-03-01")) == pytest.approx(4.5)

        editor.open_edit(created, categories)
        editor.type_amount("6")
        updated = run(tracker.save_expense(editor.save(categories, "2024-03-01")))

        assert updated.id == created.id
        summary = run(tracker.summary_for_date("2024-03-01"))
        assert summary.total == pytest.approx(6)
        assert summary.count == 1

    def test_users_do_not_see_each_other(self):
        tracker, identity, _ = make_tracker()
        identity.sign_in(AuthUser(uid="u1"))
        payload = ExpenseFields(title="Coffee", amount=4.5, category="Food", date="2024-03-01")
        created = run(tracker.save_expense(payload))
        identity.sign_out()

        identity.sign_in(AuthUser(uid="u2"))
        assert run(tracker.expenses_for_date("2024-03-01")) == []
        assert run(tracker.all_expenses()) == []
        with pytest.raises(NotAuthorized):
            run(tracker.delete_expense(created.id))
        with pytest.raises(NotAuthorized):
            run(tracker.save_expense(created))

    def test_add_and_delete_category(self):
        tracker, identity, _ = make_tracker()
        identity.sign_in(AuthUser(uid="u1"))
        added = run(tracker.add_category("Pets"))
        assert "Pets" in [c.name for c in run(tracker.categories())]
        assert run(tracker.delete_category(added.id)) is True

    def test_add_blank_category(self):
        tracker, identity, _ = make_tracker()
        identity.sign_in(AuthUser(uid="u1"))
        with pytest.raises(ValidationError, match="category name required"):
            run(tracker.add_category(" "))

    def test_delete_expense(self):
        tracker, identity, _ = make_tracker()
        identity.sign_in(AuthUser(uid="u1"))
        payload = ExpenseFields(title="Coffee", amount=4.5, category="Food", date="2024-03-01")
        created = run(tracker.save_expense(payload))
        assert run(tracker.delete_expense(created.id)) is True
        assert run(tracker.total_for_date("2024-03-01")) == 0

    def test_collaborator_failure_is_audited_and_raised(self):
        storage = FailingStore()
        tracker, identity, _ = make_tracker(storage=storage)
        identity.sign_in(AuthUser(uid="u1"))

        with pytest.raises(StorageError, match="backend unavailable"):
            run(tracker.expenses_for_date("2024-03-01"))

        errors = run(storage.query(AUDIT_COLLECTION, [("eventType", "system_error")]))
        assert len(errors) == 1
        assert errors[0]["errorMessage"] == "backend unavailable"


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_in_memory_components(self):
        identity = LocalSessionProvider(AuthUser(uid="u1"))
        tracker, storage = create_app_components(identity=identity, use_storage=False)

        assert isinstance(storage, InMemoryDocumentStore)
        assert tracker.current_user_id == "u1"
        assert len(run(tracker.categories())) == 7

    def test_currency_symbol_from_settings(self, monkeypatch):
        monkeypatch.setenv("CURRENCY_SYMBOL", "$")
        identity = LocalSessionProvider(AuthUser(uid="u1"))
        tracker, _ = create_app_components(identity=identity, use_storage=False)

        payload = ExpenseFields(title="Rent", amount=1234.5, category="Utilities", date="2024-03-01")
        run(tracker.save_expense(payload))

        assert run(tracker.formatted_total_for_date("2024-03-01")) == "$1,234.50"

    def test_default_currency_symbol(self, monkeypatch):
        monkeypatch.delenv("CURRENCY_SYMBOL", raising=False)
        identity = LocalSessionProvider(AuthUser(uid="u1"))
        tracker, _ = create_app_components(identity=identity, use_storage=False)
        assert run(tracker.formatted_total_for_date("2024-03-01")) == "₹0.00"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

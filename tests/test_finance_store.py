"""
Tests for the finance record store.

Covers merge-patch updates, the vendor rename cascade, tolerated
no-ops, category list mutation and write-through persistence.
"""

import datetime as dt
import json

import pytest
from pydantic import ValidationError

from bizbook.models import (
    VENDOR_CATEGORY,
    AuditEventType,
    AuditSeverity,
    ExpensePatch,
    FinanceState,
    VendorPatch,
)
from bizbook.queries import monthly_report
from bizbook.services.storage import CorruptedSnapshotError, InMemoryStorage, StorageError
from bizbook.stores import FinanceStore


def expense_data(**overrides):
    data = {
        "date": dt.date(2025, 6, 18),
        "amount": 80000,
        "category": "공과금",
        "description": "6월 전기요금",
    }
    data.update(overrides)
    return data


def revenue_data(**overrides):
    data = {
        "date": dt.date(2025, 6, 22),
        "amount": 450000,
        "category": "제품 판매",
        "description": "온라인 판매",
    }
    data.update(overrides)
    return data


class TestRecords:
    """Tests for add / update / delete of records."""

    def test_add_assigns_id_and_appends(self, finance_store):
        """Test new records get an id from the factory."""
        finance_store.add_expense(expense_data())
        state = finance_store.add_expense(expense_data(amount=1000))

        assert [e.id for e in state.expenses] == ["id-1", "id-2"]
        assert state.expenses[1].amount == 1000

    def test_add_vendor_defaults(self, finance_store):
        """Test vendor category defaults and optional contact info."""
        state = finance_store.add_vendor({"name": "ACME"})
        vendor = state.vendors[0]
        assert vendor.category == "주요 거래처"
        assert vendor.contact_info is None

    def test_update_changes_only_supplied_fields(self, finance_store):
        """Test merge-patch leaves absent fields untouched."""
        finance_store.add_expense(expense_data())
        before = finance_store.get_expense("id-1")

        finance_store.update_expense("id-1", ExpensePatch(amount=95000))
        after = finance_store.get_expense("id-1")

        assert after.amount == 95000
        assert after.model_dump(exclude={"amount"}) == before.model_dump(exclude={"amount"})

    def test_update_accepts_camel_case_mapping(self, finance_store):
        """Test plain mappings are validated into patches."""
        finance_store.add_vendor({"name": "ACME"})
        finance_store.update_vendor("id-1", {"contactInfo": "02-123-4567"})
        assert finance_store.get_vendor("id-1").contact_info == "02-123-4567"

    def test_explicit_none_clears_optional_field(self, finance_store):
        """Test supplying None removes a vendor link."""
        finance_store.add_expense(expense_data(
            category=VENDOR_CATEGORY, vendor_id="v1", vendor_name="ACME"
        ))
        finance_store.update_expense("id-1", {"vendor_id": None, "vendor_name": None})

        expense = finance_store.get_expense("id-1")
        assert expense.vendor_id is None
        assert expense.vendor_name is None

    def test_none_for_required_field_raises(self, finance_store):
        """Test the merged record is re-validated."""
        finance_store.add_expense(expense_data())
        before = finance_store.state

        with pytest.raises(ValidationError):
            finance_store.update_expense("id-1", {"category": None})
        assert finance_store.state is before

    def test_unknown_patch_field_rejected(self, finance_store):
        """Test patches reject fields the entity does not have."""
        finance_store.add_revenue(revenue_data())
        with pytest.raises(ValidationError):
            finance_store.update_revenue("id-1", {"vendorId": "v1"})

    def test_update_revenue(self, finance_store):
        """Test revenue merge-patch."""
        finance_store.add_revenue(revenue_data())
        finance_store.update_revenue("id-1", {"description": "스마트스토어"})
        revenue = finance_store.get_revenue("id-1")
        assert revenue.description == "스마트스토어"
        assert revenue.amount == 450000

    def test_delete_removes_by_id(self, finance_store):
        """Test delete keeps the other records in order."""
        for amount in (1, 2, 3):
            finance_store.add_revenue(revenue_data(amount=amount))
        state = finance_store.delete_revenue("id-2")
        assert [r.amount for r in state.revenues] == [1, 3]

    def test_earlier_state_not_affected_by_later_mutation(self, finance_store):
        """Test returned states are snapshots."""
        first = finance_store.add_expense(expense_data())
        finance_store.add_expense(expense_data())
        finance_store.delete_expense("id-1")
        assert len(first.expenses) == 1
        assert first.expenses[0].id == "id-1"


class TestVendorCascade:
    """Tests for the cached vendor name on expenses."""

    @pytest.fixture
    def linked_store(self, finance_store):
        finance_store.add_vendor({"name": "국내 공급업체"})   # id-1
        finance_store.add_vendor({"name": "해외 공급업체"})   # id-2
        finance_store.add_expense(expense_data(
            category=VENDOR_CATEGORY, vendor_id="id-1", vendor_name="국내 공급업체"
        ))  # id-3
        finance_store.add_expense(expense_data(
            category=VENDOR_CATEGORY, vendor_id="id-2", vendor_name="해외 공급업체"
        ))  # id-4
        finance_store.add_expense(expense_data())  # id-5
        finance_store.add_expense(expense_data(
            category=VENDOR_CATEGORY, vendor_id="id-1", vendor_name="국내 공급업체"
        ))  # id-6
        return finance_store

    def test_rename_refreshes_matching_expenses_only(self, linked_store):
        """Test the rename cascade reaches exactly the referencing expenses."""
        before = {e.id: e for e in linked_store.expenses}

        linked_store.update_vendor("id-1", VendorPatch(name="한국 공급업체"))

        for expense in linked_store.expenses:
            if expense.vendor_id == "id-1":
                assert expense.vendor_name == "한국 공급업체"
                assert expense.model_dump(exclude={"vendor_name"}) == \
                    before[expense.id].model_dump(exclude={"vendor_name"})
            else:
                assert expense == before[expense.id]
        assert linked_store.get_vendor("id-1").name == "한국 공급업체"

    def test_rename_audit_event_counts_expenses(self, linked_store, audit_logger):
        """Test the rename event reports how many expenses changed."""
        linked_store.update_vendor("id-1", {"name": "한국 공급업체"})
        event = audit_logger.recent_events(1)[0]
        assert event.event_type == AuditEventType.VENDOR_RENAMED
        assert event.details["expenses_updated"] == 2

    def test_update_without_name_leaves_expenses(self, linked_store):
        """Test non-name vendor edits do not touch expenses."""
        before = linked_store.expenses
        linked_store.update_vendor("id-1", {"contactInfo": "010-0000-0000"})
        assert linked_store.expenses == before

    def test_delete_vendor_does_not_cascade(self, linked_store):
        """Test deleting a vendor never removes or nulls expense fields."""
        before = linked_store.expenses
        state = linked_store.delete_vendor("id-1")

        assert [v.id for v in state.vendors] == ["id-2"]
        assert state.expenses == before
        assert state.expenses[0].vendor_id == "id-1"
        assert state.expenses[0].vendor_name == "국내 공급업체"


class TestNoOps:
    """Tests for the tolerant not-found policy."""

    @pytest.mark.parametrize("operation, args", [
        ("update_vendor", ("missing", {"name": "x"})),
        ("delete_vendor", ("missing",)),
        ("update_expense", ("missing", {"amount": 1})),
        ("delete_expense", ("missing",)),
        ("update_revenue", ("missing", {"amount": 1})),
        ("delete_revenue", ("missing",)),
        ("delete_expense_category", ("없는 분류",)),
        ("add_expense_category", ("기타",)),
        ("add_revenue_category", ("기타",)),
    ])
    def test_no_write_no_notify(self, finance_store, storage, audit_logger, operation, args):
        """Test no-ops return the same state without persisting or notifying."""
        calls = []
        finance_store.subscribe(lambda new, old: calls.append(new))
        before = finance_store.state

        result = getattr(finance_store, operation)(*args)

        assert result is before
        assert finance_store.state is before
        assert storage.get("finance-storage") is None
        assert calls == []
        event = audit_logger.recent_events(1)[0]
        assert event.event_type == AuditEventType.MUTATION_IGNORED
        assert event.severity == AuditSeverity.DEBUG


class TestCategories:
    """Tests for the category lists."""

    def test_duplicate_add_keeps_length(self, finance_store):
        """Test adding an existing category is ignored."""
        before = len(finance_store.expense_categories)
        finance_store.add_expense_category("기타")
        assert len(finance_store.expense_categories) == before

    def test_match_is_case_sensitive(self, finance_store):
        """Test only exact matches count as duplicates."""
        finance_store.add_revenue_category("Consulting")
        finance_store.add_revenue_category("consulting")
        assert finance_store.revenue_categories[-2:] == ("Consulting", "consulting")

    def test_lists_are_independent(self, finance_store):
        """Test expense and revenue categories mutate separately."""
        finance_store.add_expense_category("광고비")
        finance_store.delete_revenue_category("기타")

        assert "광고비" in finance_store.expense_categories
        assert "광고비" not in finance_store.revenue_categories
        assert "기타" in finance_store.expense_categories
        assert "기타" not in finance_store.revenue_categories

    def test_delete_keeps_records_carrying_category(self, finance_store):
        """Test deleting a category does not rewrite existing records."""
        finance_store.add_expense(expense_data(category="임대료"))
        finance_store.delete_expense_category("임대료")
        assert finance_store.get_expense("id-1").category == "임대료"

    def test_store_removes_reserved_category_when_asked(self, finance_store, audit_logger):
        """Test the store itself does not guard the vendor category."""
        finance_store.delete_expense_category(VENDOR_CATEGORY)

        assert VENDOR_CATEGORY not in finance_store.expense_categories
        event = audit_logger.recent_events(1)[0]
        assert event.event_type == AuditEventType.CATEGORY_DELETED
        assert event.severity == AuditSeverity.WARNING
        assert event.details["reserved"] is True

    def test_store_removes_last_category_when_asked(self, finance_store, audit_logger):
        """Test the store empties a list if every category is deleted."""
        for name in list(finance_store.revenue_categories):
            finance_store.delete_revenue_category(name)

        assert finance_store.revenue_categories == ()
        event = audit_logger.recent_events(1)[0]
        assert event.severity == AuditSeverity.WARNING
        assert event.details["remaining"] == 0


class TestPersistence:
    """Tests for write-through persistence and loading."""

    def test_seed_not_written_until_first_mutation(self, finance_store, storage):
        """Test construction alone does not write."""
        assert storage.get("finance-storage") is None
        finance_store.add_expense_category("광고비")
        assert storage.get("finance-storage") is not None

    def test_snapshot_layout(self, finance_store, storage):
        """Test the persisted JSON uses the camelCase layout."""
        finance_store.add_expense(expense_data(
            category=VENDOR_CATEGORY, vendor_id="v1", vendor_name="ACME"
        ))
        finance_store.add_revenue(revenue_data())

        payload = json.loads(storage.get("finance-storage"))
        assert payload["expenses"][0] == {
            "id": "id-1",
            "date": "2025-06-18",
            "amount": 80000,
            "category": VENDOR_CATEGORY,
            "vendorId": "v1",
            "vendorName": "ACME",
            "description": "6월 전기요금",
        }
        assert "vendorId" not in payload["revenues"][0]
        assert payload["expenseCategories"][0] == VENDOR_CATEGORY

    def test_new_store_loads_snapshot(self, finance_store, storage, audit_logger):
        """Test a restart restores the same state."""
        finance_store.add_vendor({"name": "ACME", "contactInfo": "010"})
        finance_store.add_expense(expense_data())
        finance_store.add_revenue_category("임대 수입")

        restarted = FinanceStore(storage, audit_logger=audit_logger)

        assert restarted.state == finance_store.state
        assert audit_logger.recent_events(1)[0].event_type == AuditEventType.STATE_LOADED

    def test_custom_key(self, storage, id_factory):
        """Test stores can persist under another key."""
        store = FinanceStore(storage, key="books-2025", seed=FinanceState(), id_factory=id_factory)
        store.add_vendor({"name": "ACME"})
        assert storage.get("books-2025") is not None
        assert storage.get("finance-storage") is None

    def test_reload_picks_up_external_write(self, finance_store, storage):
        """Test reload re-reads storage and notifies on change."""
        calls = []
        finance_store.subscribe(lambda new, old: calls.append((new, old)))
        other = FinanceStore(storage, seed=FinanceState())
        other.add_vendor({"name": "ACME"})

        state = finance_store.reload()

        assert [v.name for v in state.vendors] == ["ACME"]
        assert len(calls) == 1
        assert calls[0][1].vendors == ()

    def test_envelope_snapshot_accepted(self, seoul_time):
        """Test snapshots wrapped as {"state": ..., "version": ...} load."""
        snapshot = {
            "state": {
                "expenses": [{
                    "id": "e1",
                    "date": "2025-06-20T00:00:00.000Z",
                    "amount": 150000,
                    "category": VENDOR_CATEGORY,
                    "vendorId": "v1",
                    "vendorName": "국내 공급업체",
                    "description": "원자재 구매",
                }],
                "revenues": [],
                "vendors": [{"id": "v1", "name": "국내 공급업체", "category": "주요 거래처"}],
                "expenseCategories": [VENDOR_CATEGORY, "기타"],
                "revenueCategories": ["기타"],
            },
            "version": 0,
        }
        storage = InMemoryStorage({"finance-storage": json.dumps(snapshot)})

        store = FinanceStore(storage)

        assert store.expenses[0].date == dt.date(2025, 6, 20)
        assert store.expense_categories == (VENDOR_CATEGORY, "기타")
        assert store.get_vendor("v1").name == "국내 공급업체"

    def test_utc_snapshot_dates_land_in_local_month(self, seoul_time):
        """Test a local-midnight date saved as UTC is reported in its own month."""
        snapshot = {
            "state": {
                "revenues": [{
                    "id": "r1",
                    "date": "2025-06-30T15:00:00.000Z",
                    "amount": 100,
                    "category": "기타",
                    "description": "",
                }],
            },
            "version": 0,
        }
        store = FinanceStore(InMemoryStorage({"finance-storage": json.dumps(snapshot)}))

        assert store.revenues[0].date == dt.date(2025, 7, 1)
        assert monthly_report(store.revenues, store.expenses, "2025-07").total_revenue == 100
        assert monthly_report(store.revenues, store.expenses, "2025-06").total_revenue == 0

    @pytest.mark.parametrize("raw", [
        "{not json",
        '{"expenses": [{"id": "e1"}]}',
        '{"expenses": [], "unexpected": 1}',
    ])
    def test_corrupted_snapshot_raises(self, raw):
        """Test unreadable snapshots fail loudly instead of being replaced."""
        storage = InMemoryStorage({"finance-storage": raw})
        with pytest.raises(CorruptedSnapshotError):
            FinanceStore(storage)

    def test_failed_write_propagates_and_memory_runs_ahead(
        self, flaky_storage, id_factory, audit_logger
    ):
        """Test write failures reach the caller without rollback or notification."""
        store = FinanceStore(
            flaky_storage, seed=FinanceState(), audit_logger=audit_logger, id_factory=id_factory
        )
        store.add_expense(expense_data())
        persisted = flaky_storage.get("finance-storage")
        calls = []
        store.subscribe(lambda new, old: calls.append(new))

        flaky_storage.failing = True
        with pytest.raises(StorageError):
            store.add_expense(expense_data(amount=1))

        assert len(store.expenses) == 2
        assert flaky_storage.get("finance-storage") == persisted
        assert calls == []
        event = audit_logger.recent_events(1)[0]
        assert event.event_type == AuditEventType.PERSIST_FAILED
        assert event.severity == AuditSeverity.ERROR

        flaky_storage.failing = False
        store.add_expense(expense_data(amount=2))
        assert len(json.loads(flaky_storage.get("finance-storage"))["expenses"]) == 3


class TestSeed:
    """Tests for the illustrative first-start data."""

    def test_sample_data_used_without_snapshot(self, storage, id_factory):
        """Test the sample dataset when no seed is passed."""
        store = FinanceStore(storage, id_factory=id_factory)

        assert [v.name for v in store.vendors] == ["국내 공급업체", "해외 공급업체", "물류 서비스"]
        assert len(store.expenses) == 3
        assert len(store.revenues) == 3
        assert store.expenses[0].vendor_id == store.vendors[0].id
        assert store.expenses[0].vendor_name == store.vendors[0].name
        assert store.expenses[1].vendor_id is None
        assert storage.get("finance-storage") is None

    def test_snapshot_wins_over_seed(self, storage):
        """Test an existing snapshot is never replaced by the seed."""
        storage.set("finance-storage", FinanceState().model_dump_json(by_alias=True))
        store = FinanceStore(storage)
        assert store.expenses == ()


class TestSubscription:
    """Tests for explicit change notification."""

    def test_listener_receives_new_and_previous(self, finance_store):
        """Test listeners get (new_state, previous_state)."""
        calls = []
        finance_store.subscribe(lambda new, old: calls.append((new, old)))

        returned = finance_store.add_vendor({"name": "ACME"})

        assert len(calls) == 1
        new, old = calls[0]
        assert new is returned
        assert old.vendors == ()

    def test_unsubscribe_callable(self, finance_store):
        """Test the callable returned by subscribe stops notifications."""
        calls = []
        unsubscribe = finance_store.subscribe(lambda new, old: calls.append(new))
        finance_store.add_vendor({"name": "A"})
        unsubscribe()
        finance_store.add_vendor({"name": "B"})
        assert len(calls) == 1

    def test_unsubscribe_unknown_listener(self, finance_store):
        """Test removing a listener that was never added is harmless."""
        finance_store.unsubscribe(lambda new, old: None)

    def test_listener_may_unsubscribe_itself(self, finance_store):
        """Test unsubscribing during notification does not skip others."""
        calls = []

        def once(new, old):
            calls.append("once")
            finance_store.unsubscribe(once)

        finance_store.subscribe(once)
        finance_store.subscribe(lambda new, old: calls.append("always"))
        finance_store.add_vendor({"name": "A"})
        finance_store.add_vendor({"name": "B"})

        assert calls == ["once", "always", "always"]

"""
Finance Store

Holds vendors, expenses, revenues and the two category lists.

POLICIES:
- Unknown ids on update/delete are silent no-ops
- Adding a category that already exists (exact, case-sensitive) is a no-op
- Renaming a vendor refreshes the cached vendor_name on every expense
  that references it
- Deleting a vendor leaves referencing expenses untouched
- Category deletion is not guarded here; see
  bizbook.validation.can_delete_category
"""

from typing import Any, Mapping, Optional, Union

from bizbook.models.audit import AuditEventBuilder
from bizbook.models.finance import (
    VENDOR_CATEGORY,
    Expense,
    ExpenseDraft,
    ExpensePatch,
    FinanceState,
    Revenue,
    RevenueDraft,
    RevenuePatch,
    Vendor,
    VendorDraft,
    VendorPatch,
)
from bizbook.stores.base import PersistentStore, coerce_model, merge_patch
from bizbook.stores.seed import sample_finance_state


VendorInput = Union[VendorDraft, Mapping[str, Any]]
ExpenseInput = Union[ExpenseDraft, Mapping[str, Any]]
RevenueInput = Union[RevenueDraft, Mapping[str, Any]]


class FinanceStore(PersistentStore[FinanceState]):
    """Record store for vendors, expenses, revenues and categories."""

    state_model = FinanceState
    default_key = "finance-storage"

    # Read helpers ----------------------------------------------------------

    @property
    def vendors(self) -> tuple[Vendor, ...]:
        return self._state.vendors

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self._state.expenses

    @property
    def revenues(self) -> tuple[Revenue, ...]:
        return self._state.revenues

    @property
    def expense_categories(self) -> tuple[str, ...]:
        return self._state.expense_categories

    @property
    def revenue_categories(self) -> tuple[str, ...]:
        return self._state.revenue_categories

    def get_vendor(self, vendor_id: str) -> Optional[Vendor]:
        return next((v for v in self._state.vendors if v.id == vendor_id), None)

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        return next((e for e in self._state.expenses if e.id == expense_id), None)

    def get_revenue(self, revenue_id: str) -> Optional[Revenue]:
        return next((r for r in self._state.revenues if r.id == revenue_id), None)

    # Vendors ---------------------------------------------------------------

    def add_vendor(self, data: VendorInput) -> FinanceState:
        draft = coerce_model(VendorDraft, data)
        vendor = Vendor(id=self._new_id(), **draft.model_dump())
        return self._commit(
            self._state.model_copy(update={"vendors": self._state.vendors + (vendor,)}),
            AuditEventBuilder.record_added(self._key, "vendor", vendor.id),
        )

    def update_vendor(
        self,
        vendor_id: str,
        patch: Union[VendorPatch, Mapping[str, Any]],
    ) -> FinanceState:
        """
        Merge a patch into a vendor.

        If the patch carries a name, every expense whose vendor_id
        equals this vendor gets its cached vendor_name overwritten.
        """
        changes = coerce_model(VendorPatch, patch).changes()
        if self.get_vendor(vendor_id) is None:
            return self._ignore("update_vendor", "unknown id", "vendor", vendor_id)

        vendors = tuple(
            merge_patch(v, changes) if v.id == vendor_id else v
            for v in self._state.vendors
        )
        update: dict[str, Any] = {"vendors": vendors}

        new_name = changes.get("name")
        if new_name:
            refreshed = 0
            expenses = []
            for expense in self._state.expenses:
                if expense.vendor_id == vendor_id:
                    expense = expense.model_copy(update={"vendor_name": new_name})
                    refreshed += 1
                expenses.append(expense)
            update["expenses"] = tuple(expenses)
            event = AuditEventBuilder.vendor_renamed(self._key, vendor_id, new_name, refreshed)
        else:
            event = AuditEventBuilder.record_updated(
                self._key, "vendor", vendor_id, sorted(changes)
            )

        return self._commit(self._state.model_copy(update=update), event)

    def delete_vendor(self, vendor_id: str) -> FinanceState:
        """Remove a vendor. Expenses keep their vendor_id / vendor_name."""
        if self.get_vendor(vendor_id) is None:
            return self._ignore("delete_vendor", "unknown id", "vendor", vendor_id)
        vendors = tuple(v for v in self._state.vendors if v.id != vendor_id)
        return self._commit(
            self._state.model_copy(update={"vendors": vendors}),
            AuditEventBuilder.record_deleted(self._key, "vendor", vendor_id),
        )

    # Expenses --------------------------------------------------------------

    def add_expense(self, data: ExpenseInput) -> FinanceState:
        draft = coerce_model(ExpenseDraft, data)
        expense = Expense(id=self._new_id(), **draft.model_dump())
        return self._commit(
            self._state.model_copy(update={"expenses": self._state.expenses + (expense,)}),
            AuditEventBuilder.record_added(self._key, "expense", expense.id),
        )

    def update_expense(
        self,
        expense_id: str,
        patch: Union[ExpensePatch, Mapping[str, Any]],
    ) -> FinanceState:
        changes = coerce_model(ExpensePatch, patch).changes()
        if self.get_expense(expense_id) is None:
            return self._ignore("update_expense", "unknown id", "expense", expense_id)
        expenses = tuple(
            merge_patch(e, changes) if e.id == expense_id else e
            for e in self._state.expenses
        )
        return self._commit(
            self._state.model_copy(update={"expenses": expenses}),
            AuditEventBuilder.record_updated(self._key, "expense", expense_id, sorted(changes)),
        )

    def delete_expense(self, expense_id: str) -> FinanceState:
        if self.get_expense(expense_id) is None:
            return self._ignore("delete_expense", "unknown id", "expense", expense_id)
        expenses = tuple(e for e in self._state.expenses if e.id != expense_id)
        return self._commit(
            self._state.model_copy(update={"expenses": expenses}),
            AuditEventBuilder.record_deleted(self._key, "expense", expense_id),
        )

    # Revenues --------------------------------------------------------------

    def add_revenue(self, data: RevenueInput) -> FinanceState:
        draft = coerce_model(RevenueDraft, data)
        revenue = Revenue(id=self._new_id(), **draft.model_dump())
        return self._commit(
            self._state.model_copy(update={"revenues": self._state.revenues + (revenue,)}),
            AuditEventBuilder.record_added(self._key, "revenue", revenue.id),
        )

    def update_revenue(
        self,
        revenue_id: str,
        patch: Union[RevenuePatch, Mapping[str, Any]],
    ) -> FinanceState:
        changes = coerce_model(RevenuePatch, patch).changes()
        if self.get_revenue(revenue_id) is None:
            return self._ignore("update_revenue", "unknown id", "revenue", revenue_id)
        revenues = tuple(
            merge_patch(r, changes) if r.id == revenue_id else r
            for r in self._state.revenues
        )
        return self._commit(
            self._state.model_copy(update={"revenues": revenues}),
            AuditEventBuilder.record_updated(self._key, "revenue", revenue_id, sorted(changes)),
        )

    def delete_revenue(self, revenue_id: str) -> FinanceState:
        if self.get_revenue(revenue_id) is None:
            return self._ignore("delete_revenue", "unknown id", "revenue", revenue_id)
        revenues = tuple(r for r in self._state.revenues if r.id != revenue_id)
        return self._commit(
            self._state.model_copy(update={"revenues": revenues}),
            AuditEventBuilder.record_deleted(self._key, "revenue", revenue_id),
        )

    # Categories ------------------------------------------------------------

    def add_expense_category(self, name: str) -> FinanceState:
        return self._add_category("expense", name)

    def delete_expense_category(self, name: str) -> FinanceState:
        return self._delete_category("expense", name)

    def add_revenue_category(self, name: str) -> FinanceState:
        return self._add_category("revenue", name)

    def delete_revenue_category(self, name: str) -> FinanceState:
        return self._delete_category("revenue", name)

    def _add_category(self, kind: str, name: str) -> FinanceState:
        field = f"{kind}_categories"
        categories: tuple[str, ...] = getattr(self._state, field)
        if name in categories:
            return self._ignore(f"add_{kind}_category", f"'{name}' already exists")
        return self._commit(
            self._state.model_copy(update={field: categories + (name,)}),
            AuditEventBuilder.category_added(self._key, kind, name),
        )

    def _delete_category(self, kind: str, name: str) -> FinanceState:
        field = f"{kind}_categories"
        categories: tuple[str, ...] = getattr(self._state, field)
        if name not in categories:
            return self._ignore(f"delete_{kind}_category", f"'{name}' not in list")
        remaining = tuple(c for c in categories if c != name)
        return self._commit(
            self._state.model_copy(update={field: remaining}),
            AuditEventBuilder.category_deleted(
                self._key,
                kind,
                name,
                reserved=(kind == "expense" and name == VENDOR_CATEGORY),
                remaining=len(remaining),
            ),
        )

    # Hooks -----------------------------------------------------------------

    def _seed_state(self) -> FinanceState:
        return sample_finance_state(self._new_id)

    def _counts(self, state: FinanceState) -> dict[str, int]:
        return {
            "expenses": len(state.expenses),
            "revenues": len(state.revenues),
            "vendors": len(state.vendors),
            "expense_categories": len(state.expense_categories),
            "revenue_categories": len(state.revenue_categories),
        }

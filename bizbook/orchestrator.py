"""
Main Orchestrator for bizbook

This module ties the components together and defines the caller-side
flows that forms and tables go through:
1. Finance entry (draft → vendor link → validate → store)
2. Task entry (draft → validate → store)

DESIGN DECISION: The orchestrator enforces the entry rules, the stores
do not. Code that talks to a store directly bypasses validation.
"""

import logging
from typing import Any, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError

from bizbook.audit import AuditLogger
from bizbook.config import Settings, get_settings
from bizbook.models.finance import (
    VENDOR_CATEGORY,
    ExpenseDraft,
    ExpensePatch,
    FinanceState,
    RevenueDraft,
    RevenuePatch,
    VendorDraft,
    VendorPatch,
)
from bizbook.models.task import TaskDraft, TaskPatch, TaskState
from bizbook.models.validation import ValidationIssue, ValidationResult
from bizbook.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
)
from bizbook.stores import FinanceStore, TaskStore, merge_patch
from bizbook.validation import (
    EntryRejectedError,
    EntryValidator,
    can_delete_category,
    link_expense_vendor,
)


ModelT = TypeVar("ModelT", bound=BaseModel)


def _build(model_cls: type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """Coerce caller input, turning schema errors into a rejected entry."""
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(dict(data))
    except ValidationError as e:
        issues = [
            ValidationIssue(
                field=".".join(str(part) for part in error["loc"]) or "entry",
                issue_type=error["type"],
                message=error["msg"],
                severity="error",
            )
            for error in e.errors()
        ]
        raise EntryRejectedError(ValidationResult(issues=issues)) from e


def _raise_if_invalid(result: ValidationResult) -> None:
    if not result.is_valid:
        raise EntryRejectedError(result)


class FinanceFlow:
    """
    Orchestrates finance entry.

    Every save goes through:
    1. Coerce the input into a draft
    2. Apply the vendor link invariant (expenses only)
    3. Validate (positive amount, non-empty text)
    4. Hand the draft to the store
    """

    def __init__(
        self,
        store: FinanceStore,
        validator: Optional[EntryValidator] = None,
    ):
        self._store = store
        self._validator = validator or EntryValidator()

    @property
    def store(self) -> FinanceStore:
        return self._store

    # Expenses --------------------------------------------------------------

    def record_expense(self, data: Union[ExpenseDraft, Mapping[str, Any]]) -> FinanceState:
        vendors = self._store.vendors
        draft = link_expense_vendor(_build(ExpenseDraft, data), vendors)
        _raise_if_invalid(self._validator.validate_expense(draft, vendors))
        return self._store.add_expense(draft)

    def edit_expense(
        self,
        expense_id: str,
        patch: Union[ExpensePatch, Mapping[str, Any]],
    ) -> FinanceState:
        """
        Validate the merged expense, then patch it.

        Vendor fields are always rewritten from the merged view, so a
        category change away from the vendor category clears them.
        A vendor that was deleted after the expense was recorded is
        tolerated until the edit picks a different vendor.
        """
        changes = _build(ExpensePatch, patch).changes()
        existing = self._store.get_expense(expense_id)
        if existing is None:
            return self._store.update_expense(expense_id, changes)

        vendors = self._store.vendors
        merged = merge_patch(existing, changes)
        draft = link_expense_vendor(
            ExpenseDraft.model_validate(merged.model_dump(exclude={"id"})),
            vendors,
        )
        _raise_if_invalid(self._validator.validate_expense(
            draft, vendors if "vendor_id" in changes else None
        ))

        changes["vendor_id"] = draft.vendor_id
        changes["vendor_name"] = draft.vendor_name
        return self._store.update_expense(expense_id, ExpensePatch(**changes))

    # Revenues --------------------------------------------------------------

    def record_revenue(self, data: Union[RevenueDraft, Mapping[str, Any]]) -> FinanceState:
        draft = _build(RevenueDraft, data)
        _raise_if_invalid(self._validator.validate_revenue(draft))
        return self._store.add_revenue(draft)

    def edit_revenue(
        self,
        revenue_id: str,
        patch: Union[RevenuePatch, Mapping[str, Any]],
    ) -> FinanceState:
        changes = _build(RevenuePatch, patch).changes()
        existing = self._store.get_revenue(revenue_id)
        if existing is not None:
            merged = merge_patch(existing, changes)
            draft = RevenueDraft.model_validate(merged.model_dump(exclude={"id"}))
            _raise_if_invalid(self._validator.validate_revenue(draft))
        return self._store.update_revenue(revenue_id, RevenuePatch(**changes))

    # Vendors ---------------------------------------------------------------

    def register_vendor(self, data: Union[VendorDraft, Mapping[str, Any]]) -> FinanceState:
        draft = _build(VendorDraft, data)
        _raise_if_invalid(self._validator.validate_vendor(draft))
        return self._store.add_vendor(draft)

    def edit_vendor(
        self,
        vendor_id: str,
        patch: Union[VendorPatch, Mapping[str, Any]],
    ) -> FinanceState:
        changes = _build(VendorPatch, patch).changes()
        existing = self._store.get_vendor(vendor_id)
        if existing is not None:
            merged = merge_patch(existing, changes)
            _raise_if_invalid(self._validator.validate_vendor(
                VendorDraft.model_validate(merged.model_dump(exclude={"id"}))
            ))
        return self._store.update_vendor(vendor_id, VendorPatch(**changes))

    # Categories ------------------------------------------------------------

    def add_expense_category(self, name: str) -> FinanceState:
        result = self._validator.validate_category_name(name, self._store.expense_categories)
        _raise_if_invalid(result)
        return self._store.add_expense_category(name.strip())

    def add_revenue_category(self, name: str) -> FinanceState:
        result = self._validator.validate_category_name(name, self._store.revenue_categories)
        _raise_if_invalid(result)
        return self._store.add_revenue_category(name.strip())

    def remove_expense_category(self, name: str) -> FinanceState:
        self._guard_category_delete(self._store.expense_categories, name, VENDOR_CATEGORY)
        return self._store.delete_expense_category(name)

    def remove_revenue_category(self, name: str) -> FinanceState:
        self._guard_category_delete(self._store.revenue_categories, name, None)
        return self._store.delete_revenue_category(name)

    def _guard_category_delete(
        self,
        categories: tuple[str, ...],
        name: str,
        reserved: Optional[str],
    ) -> None:
        if can_delete_category(categories, name, reserved=reserved):
            return
        if name == reserved:
            message = f"'{name}' is a reserved category"
        elif name not in categories:
            message = f"Category '{name}' does not exist"
        else:
            message = "The last remaining category cannot be deleted"
        raise EntryRejectedError(ValidationResult(issues=[
            ValidationIssue(
                field="category",
                issue_type="protected",
                message=message,
                severity="error",
            )
        ]))


class TaskFlow:
    """Orchestrates task entry."""

    def __init__(
        self,
        store: TaskStore,
        validator: Optional[EntryValidator] = None,
    ):
        self._store = store
        self._validator = validator or EntryValidator()

    @property
    def store(self) -> TaskStore:
        return self._store

    def save_task(
        self,
        data: Union[TaskDraft, Mapping[str, Any]],
        task_id: Optional[str] = None,
    ) -> TaskState:
        """
        Create a task, or overwrite every field of an existing one.

        Args:
            data: Complete task fields, as a form submits them
            task_id: Task being edited; None creates a new task
        """
        draft = _build(TaskDraft, data)
        _raise_if_invalid(self._validator.validate_task(draft))
        if task_id is None:
            return self._store.add_task(draft)
        return self._store.update_task(task_id, TaskPatch(**draft.model_dump()))

    def complete_task(self, task_id: str) -> TaskState:
        return self._store.complete_task(task_id)

    def remove_task(self, task_id: str) -> TaskState:
        return self._store.delete_task(task_id)


def create_storage(settings: Settings) -> KeyValueStorageInterface:
    """Storage backend selected by settings."""
    storage_settings = settings.storage
    if storage_settings.backend == "memory":
        return InMemoryStorage()
    return JsonFileStorage(storage_settings.data_dir)


def create_app_components(
    settings: Optional[Settings] = None,
) -> tuple[FinanceStore, TaskStore, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; defaults to get_settings()

    Returns:
        (finance_store, task_store, audit_logger)
    """
    settings = settings or get_settings()
    app_settings = settings.app
    storage_settings = settings.storage

    logging.getLogger("bizbook").setLevel(app_settings.log_level)

    storage = create_storage(settings)
    audit_logger = AuditLogger(history_size=app_settings.audit_history_size)

    finance_store = FinanceStore(
        storage,
        key=storage_settings.finance_key,
        seed=None if app_settings.seed_sample_data else FinanceState(),
        audit_logger=audit_logger,
    )
    task_store = TaskStore(
        storage,
        key=storage_settings.task_key,
        seed=None if app_settings.seed_sample_data else TaskState(),
        audit_logger=audit_logger,
    )

    return finance_store, task_store, audit_logger

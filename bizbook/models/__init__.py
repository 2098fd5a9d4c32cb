"""
Data Models Package

This package contains all Pydantic models used in bizbook.
All data flowing through the stores and reports conforms to these schemas.
"""

from bizbook.models.finance import (
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_REVENUE_CATEGORIES,
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
from bizbook.models.task import (
    Task,
    TaskDraft,
    TaskPatch,
    TaskPriority,
    TaskState,
    TaskStatus,
)
from bizbook.models.report import CategoryShare, MonthlyReport, TaskSummary
from bizbook.models.validation import ValidationIssue, ValidationResult
from bizbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "DEFAULT_EXPENSE_CATEGORIES",
    "DEFAULT_REVENUE_CATEGORIES",
    "VENDOR_CATEGORY",
    "Expense",
    "ExpenseDraft",
    "ExpensePatch",
    "FinanceState",
    "Revenue",
    "RevenueDraft",
    "RevenuePatch",
    "Vendor",
    "VendorDraft",
    "VendorPatch",
    # Task models
    "Task",
    "TaskDraft",
    "TaskPatch",
    "TaskPriority",
    "TaskState",
    "TaskStatus",
    # Report models
    "CategoryShare",
    "MonthlyReport",
    "TaskSummary",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

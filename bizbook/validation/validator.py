"""
Entry Validation

DESIGN DECISION: The stores accept whatever they are given.
Checks happen here, on the caller side, before a store is invoked:
- Amounts must be present and greater than zero
- Names, titles and categories must be non-empty
- An expense only carries vendor fields while its category is
  the reserved vendor category
- The reserved category and the last remaining category are not
  offered for deletion

Validation NEVER silently fixes amounts or names. It reports issues.
The one normalization is link_expense_vendor, which derives the
cached vendor name from the chosen vendor id.
"""

from typing import Any, Iterable, Optional, Sequence

from bizbook.models.finance import (
    VENDOR_CATEGORY,
    ExpenseDraft,
    RevenueDraft,
    Vendor,
    VendorDraft,
)
from bizbook.models.task import TaskDraft
from bizbook.models.validation import ValidationIssue, ValidationResult


class EntryRejectedError(ValueError):
    """An entry failed validation or a guard refused an operation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(result.messages()) or "Entry rejected")


class EntryValidator:
    """
    Validates drafts before they reach a store.

    Each validate_* method returns a ValidationResult; nothing raises.
    """

    def validate_expense(
        self,
        draft: ExpenseDraft,
        vendors: Optional[Iterable[Vendor]] = None,
    ) -> ValidationResult:
        """
        Check an expense draft.

        Args:
            draft: Expense fields as entered
            vendors: Known vendors. When given, a vendor-category draft
                     must reference one of them.
        """
        issues = self._check_amount(draft.amount)
        issues += self._check_required(draft.category, "category", "Category")
        if vendors is not None:
            issues += self._check_vendor(draft, vendors)
        return ValidationResult(issues=issues)

    def validate_revenue(self, draft: RevenueDraft) -> ValidationResult:
        issues = self._check_amount(draft.amount)
        issues += self._check_required(draft.category, "category", "Category")
        return ValidationResult(issues=issues)

    def validate_vendor(self, draft: VendorDraft) -> ValidationResult:
        return ValidationResult(issues=self._check_required(draft.name, "name", "Vendor name"))

    def validate_task(self, draft: TaskDraft) -> ValidationResult:
        return ValidationResult(issues=self._check_required(draft.title, "title", "Task title"))

    def validate_category_name(
        self,
        name: str,
        existing: Iterable[str] = (),
    ) -> ValidationResult:
        """
        Check a new category name.

        The name is judged after trimming. A duplicate is a warning:
        the store ignores duplicate adds anyway.
        """
        issues = self._check_required(name, "category", "Category name")
        if not issues and name.strip() in set(existing):
            issues.append(ValidationIssue(
                field="category",
                issue_type="duplicate",
                message=f"Category '{name.strip()}' already exists",
                severity="warning",
            ))
        return ValidationResult(issues=issues)

    # Internal checks ------------------------------------------------------

    def _check_amount(self, amount: Any) -> list[ValidationIssue]:
        if amount is None:
            return [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            )]
        if amount <= 0:
            return [ValidationIssue(
                field="amount",
                issue_type="non_positive",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter the amount in whole currency units",
            )]
        return []

    def _check_vendor(self, draft: ExpenseDraft, vendors: Iterable[Vendor]) -> list[ValidationIssue]:
        if draft.category != VENDOR_CATEGORY or not draft.vendor_id:
            return []
        if any(vendor.id == draft.vendor_id for vendor in vendors):
            return []
        return [ValidationIssue(
            field="vendor_id",
            issue_type="unknown_vendor",
            message=f"Vendor '{draft.vendor_id}' does not exist",
            severity="error",
            suggested_fix="Pick a vendor from the vendor list",
        )]

    def _check_required(self, value: Optional[str], field: str, label: str) -> list[ValidationIssue]:
        if value is None or not value.strip():
            return [ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} cannot be empty",
                severity="error",
            )]
        return []


def link_expense_vendor(draft: ExpenseDraft, vendors: Iterable[Vendor]) -> ExpenseDraft:
    """
    Bring an expense draft in line with the vendor link invariant.

    - Category other than VENDOR_CATEGORY: vendor_id and vendor_name cleared
    - Vendor chosen: vendor_name copied from that vendor
    - Vendor chosen but no longer listed: the cached vendor_name is kept
    - No vendor chosen: vendor_name cleared

    New entries referencing an unknown vendor are rejected by
    EntryValidator.validate_expense when it is given the vendor list.
    """
    if draft.category != VENDOR_CATEGORY or not draft.vendor_id:
        vendor_id, vendor_name = (None, None)
    else:
        vendor_id = draft.vendor_id
        vendor_name = next(
            (v.name for v in vendors if v.id == vendor_id),
            draft.vendor_name,
        )

    if (vendor_id, vendor_name) == (draft.vendor_id, draft.vendor_name):
        return draft
    return draft.model_copy(update={"vendor_id": vendor_id, "vendor_name": vendor_name})


def can_delete_category(
    categories: Sequence[str],
    name: str,
    reserved: Optional[str] = None,
) -> bool:
    """
    Whether a category may be offered for deletion.

    False for the reserved category and for the last remaining one.
    For expense lists pass reserved=VENDOR_CATEGORY.
    """
    if reserved is not None and name == reserved:
        return False
    return name in categories and len(categories) > 1

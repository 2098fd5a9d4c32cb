"""
Finance Data Models for bizbook

These models define the schemas for vendors, expenses, revenues and
the finance store snapshot. They are designed to:
1. Round-trip the persisted camelCase JSON layout
2. Keep records immutable once built
3. Express partial updates as explicit patch types

DESIGN DECISION: Every entity comes in three shapes.
- Draft: the caller-supplied fields, everything except the id
- Entity: draft + id assigned by the store
- Patch: every field optional; only explicitly supplied fields apply
"""

import datetime as dt
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# CONSTANTS
# =============================================================================

# Reserved expense category linking an expense to a vendor.
VENDOR_CATEGORY = "거래처"

DEFAULT_EXPENSE_CATEGORIES: tuple[str, ...] = (
    VENDOR_CATEGORY,
    "공과금",
    "인건비",
    "임대료",
    "기타",
)

DEFAULT_REVENUE_CATEGORIES: tuple[str, ...] = (
    "제품 판매",
    "서비스 제공",
    "이자 수입",
    "기타",
)


def coerce_iso_date(value: Any) -> Any:
    """
    Accept full ISO-8601 timestamps where a calendar date is expected.

    Snapshots written by the browser app store dates as UTC instants,
    e.g. local midnight of July 1 in KST is "2025-06-30T15:00:00.000Z".
    The instant is converted to local time before the date is taken.
    Plain "YYYY-MM-DD" strings pass through unchanged.
    """
    if isinstance(value, str) and "T" in value:
        stamp = value.strip()
        if stamp.endswith(("Z", "z")):
            stamp = stamp[:-1] + "+00:00"
        try:
            return dt.datetime.fromisoformat(stamp).astimezone().date()
        except ValueError:
            # Leave it to the date validator to report.
            return value
    return value


# Calendar date that also accepts full ISO-8601 timestamps on input.
IsoDate = Annotated[dt.date, BeforeValidator(coerce_iso_date)]


class FinanceModel(BaseModel):
    """Base config: camelCase aliases on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class PatchModel(FinanceModel):
    """
    Base for partial updates.

    Only fields the caller explicitly set are applied; see changes().
    """

    model_config = ConfigDict(frozen=False)

    def changes(self) -> dict[str, Any]:
        """Explicitly supplied fields, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


# =============================================================================
# VENDOR
# =============================================================================

class VendorDraft(FinanceModel):
    """Vendor fields supplied by the caller."""

    name: str = Field(
        ...,
        description="Vendor name; copied onto linked expenses"
    )
    category: str = Field(
        default="주요 거래처",
        description="Vendor classification"
    )
    contact_info: Optional[str] = Field(
        default=None,
        description="Phone number or other contact detail"
    )


class Vendor(VendorDraft):
    """A stored vendor."""

    id: str = Field(..., min_length=1)


class VendorPatch(PatchModel):
    name: Optional[str] = None
    category: Optional[str] = None
    contact_info: Optional[str] = None


# =============================================================================
# EXPENSE
# =============================================================================

class ExpenseDraft(FinanceModel):
    """
    Expense fields supplied by the caller.

    vendor_id/vendor_name are only meaningful when category is
    VENDOR_CATEGORY; see bizbook.validation.link_expense_vendor.
    """

    date: IsoDate
    amount: int = Field(
        ...,
        ge=0,
        description="Amount in whole currency units"
    )
    category: str
    vendor_id: Optional[str] = Field(
        default=None,
        description="Referenced vendor, if any"
    )
    vendor_name: Optional[str] = Field(
        default=None,
        description="Cached copy of the referenced vendor's name"
    )
    description: str = ""


class Expense(ExpenseDraft):
    """A stored expense."""

    id: str = Field(..., min_length=1)


class ExpensePatch(PatchModel):
    date: Optional[IsoDate] = None
    amount: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = None
    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = None
    description: Optional[str] = None


# =============================================================================
# REVENUE
# =============================================================================

class RevenueDraft(FinanceModel):
    """Revenue fields supplied by the caller. No vendor linkage."""

    date: IsoDate
    amount: int = Field(
        ...,
        ge=0,
        description="Amount in whole currency units"
    )
    category: str
    description: str = ""


class Revenue(RevenueDraft):
    """A stored revenue record."""

    id: str = Field(..., min_length=1)


class RevenuePatch(PatchModel):
    date: Optional[IsoDate] = None
    amount: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None


# =============================================================================
# STORE SNAPSHOT
# =============================================================================

class FinanceState(FinanceModel):
    """
    Complete finance store snapshot.

    This is exactly what is persisted under the finance key. Collections
    are tuples: a snapshot handed out once never changes afterwards.
    """

    expenses: tuple[Expense, ...] = ()
    revenues: tuple[Revenue, ...] = ()
    vendors: tuple[Vendor, ...] = ()
    expense_categories: tuple[str, ...] = DEFAULT_EXPENSE_CATEGORIES
    revenue_categories: tuple[str, ...] = DEFAULT_REVENUE_CATEGORIES

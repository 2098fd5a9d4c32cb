"""
Monthly Report Engine

DESIGN DECISION: Report building is DETERMINISTIC and PURE.
Given the current revenue and expense collections and a month key,
it returns a read-only MonthlyReport. Nothing here touches a store;
callers pass snapshots in.

Month keys are "YYYY-MM" strings with a 1-indexed month throughout.

Ordering rules:
- Category totals iterate by descending total; equal totals keep the
  order in which their category was first encountered
- The max day is the day with the highest total; on a tie the lower
  day number wins
"""

import datetime as dt
import re
from typing import Iterable, Literal, Optional, Sequence, TypeVar

from bizbook.models.finance import Expense, Revenue
from bizbook.models.report import MonthlyReport


MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

RecordT = TypeVar("RecordT", Revenue, Expense)


class InvalidMonthKeyError(ValueError):
    """A month key is not a valid 'YYYY-MM' string."""
    pass


def parse_month_key(year_month: str) -> tuple[int, int]:
    """
    Split a month key into (year, month), month 1-12.

    Raises:
        InvalidMonthKeyError: If the key is malformed
    """
    match = MONTH_KEY_PATTERN.fullmatch(year_month.strip()) if isinstance(year_month, str) else None
    if match is None:
        raise InvalidMonthKeyError(f"Month key must look like YYYY-MM, got {year_month!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidMonthKeyError(f"Month out of range in {year_month!r}")
    return year, month


def month_key(day: dt.date) -> str:
    """Month key of a calendar date."""
    return f"{day.year:04d}-{day.month:02d}"


# =============================================================================
# GROUPING HELPERS
# =============================================================================

def _in_month(records: Iterable[RecordT], year: int, month: int) -> tuple[RecordT, ...]:
    return tuple(r for r in records if r.date.year == year and r.date.month == month)


def _sum_by_category(records: Iterable[RecordT]) -> dict[str, int]:
    """Group by category in first-encountered order, then sort by total descending."""
    totals: dict[str, int] = {}
    for record in records:
        totals[record.category] = totals.get(record.category, 0) + record.amount
    # sorted() is stable, so equal totals keep first-encountered order.
    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))


def _sum_by_day(records: Iterable[RecordT]) -> dict[int, int]:
    totals: dict[int, int] = {}
    for record in records:
        totals[record.date.day] = totals.get(record.date.day, 0) + record.amount
    return dict(sorted(totals.items()))


def _max_day(daily: dict[int, int]) -> Optional[int]:
    """Highest-total day; input is in ascending day order, so ties go to the lower day."""
    ranked = sorted(daily.items(), key=lambda item: item[1], reverse=True)
    return ranked[0][0] if ranked else None


# =============================================================================
# PUBLIC API
# =============================================================================

def monthly_report(
    revenues: Iterable[Revenue],
    expenses: Iterable[Expense],
    year_month: str,
) -> MonthlyReport:
    """
    Build the report for one calendar month.

    Args:
        revenues: All revenue records (any month)
        expenses: All expense records (any month)
        year_month: Month key, "YYYY-MM"

    Returns:
        A MonthlyReport over copies of the records in that month

    Raises:
        InvalidMonthKeyError: If year_month is malformed
    """
    year, month = parse_month_key(year_month)

    filtered_revenues = _in_month(revenues, year, month)
    filtered_expenses = _in_month(expenses, year, month)

    revenue_by_category = _sum_by_category(filtered_revenues)
    expense_by_category = _sum_by_category(filtered_expenses)

    total_revenue = sum(r.amount for r in filtered_revenues)
    total_expense = sum(e.amount for e in filtered_expenses)
    profit = total_revenue - total_expense
    profit_margin = (profit / total_revenue) * 100 if total_revenue > 0 else 0.0

    daily_revenues = _sum_by_day(filtered_revenues)
    daily_expenses = _sum_by_day(filtered_expenses)

    return MonthlyReport(
        year_month=f"{year:04d}-{month:02d}",
        filtered_revenues=filtered_revenues,
        filtered_expenses=filtered_expenses,
        revenue_by_category=revenue_by_category,
        expense_by_category=expense_by_category,
        daily_revenues=daily_revenues,
        daily_expenses=daily_expenses,
        total_revenue=total_revenue,
        total_expense=total_expense,
        profit=profit,
        profit_margin=profit_margin,
        max_revenue_day=_max_day(daily_revenues),
        max_expense_day=_max_day(daily_expenses),
        top_expense_category=next(iter(expense_by_category), None),
    )


def available_months(
    revenues: Iterable[Revenue],
    expenses: Iterable[Expense],
) -> list[str]:
    """
    Distinct month keys that have at least one record, newest first.

    Zero-padded keys sort chronologically as plain strings.
    """
    keys = {month_key(r.date) for r in revenues}
    keys.update(month_key(e.date) for e in expenses)
    return sorted(keys, reverse=True)


def default_month(months: Sequence[str], today: Optional[dt.date] = None) -> str:
    """Newest available month, or the current month when there are none."""
    if months:
        return months[0]
    return month_key(today or dt.date.today())


def step_month(
    months: Sequence[str],
    current: str,
    direction: Literal["prev", "next"],
) -> str:
    """
    Move through a newest-first month list.

    "prev" goes to the older month, "next" to the newer one. Stepping
    past either end, or from a month not in the list, returns current.
    """
    if direction not in ("prev", "next"):
        raise ValueError(f"direction must be 'prev' or 'next', got {direction!r}")
    try:
        index = list(months).index(current)
    except ValueError:
        return current

    target = index + 1 if direction == "prev" else index - 1
    if 0 <= target < len(months):
        return months[target]
    return current

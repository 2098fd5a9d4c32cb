"""
Report Models for bizbook

Read-only structures produced by the aggregation engine in
bizbook.queries. They hold their own copies of the filtered
records, so later store mutations never change a built report.
"""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from bizbook.models.finance import Expense, Revenue
from bizbook.models.task import TaskPriority, TaskStatus


class CategoryShare(BaseModel):
    """One row of a category breakdown."""

    model_config = ConfigDict(frozen=True)

    category: str
    total: int
    percent: float = Field(
        ...,
        ge=0.0,
        description="Share of the side total, 0-100"
    )


class MonthlyReport(BaseModel):
    """
    Revenue / expense report for one calendar month.

    Category mappings iterate by descending total, ties kept in
    first-encountered order. Daily mappings iterate by ascending day.
    """

    model_config = ConfigDict(frozen=True)

    year_month: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
        description="Month key, YYYY-MM"
    )

    # Records that fell into the month
    filtered_revenues: tuple[Revenue, ...] = ()
    filtered_expenses: tuple[Expense, ...] = ()

    # Group-by sums
    revenue_by_category: dict[str, int] = Field(default_factory=dict)
    expense_by_category: dict[str, int] = Field(default_factory=dict)
    daily_revenues: dict[int, int] = Field(default_factory=dict)
    daily_expenses: dict[int, int] = Field(default_factory=dict)

    # Totals
    total_revenue: int = 0
    total_expense: int = 0
    profit: int = 0
    profit_margin: float = Field(
        default=0.0,
        description="profit / total_revenue * 100; 0 when there is no revenue"
    )

    # Extrema
    max_revenue_day: Optional[int] = Field(default=None, ge=1, le=31)
    max_expense_day: Optional[int] = Field(default=None, ge=1, le=31)
    top_expense_category: Optional[str] = None

    @property
    def revenue_count(self) -> int:
        return len(self.filtered_revenues)

    @property
    def expense_count(self) -> int:
        return len(self.filtered_expenses)

    @property
    def max_revenue_date(self) -> Optional[dt.date]:
        return self._day_to_date(self.max_revenue_day)

    @property
    def max_expense_date(self) -> Optional[dt.date]:
        return self._day_to_date(self.max_expense_day)

    def category_shares(self, kind: Literal["revenue", "expense"]) -> list[CategoryShare]:
        """
        Category breakdown rows in display order.

        Args:
            kind: "revenue" or "expense"

        Returns:
            One row per category with its percentage of the side total
        """
        if kind == "revenue":
            totals, grand_total = self.revenue_by_category, self.total_revenue
        elif kind == "expense":
            totals, grand_total = self.expense_by_category, self.total_expense
        else:
            raise ValueError(f"Unknown breakdown kind: {kind}")

        return [
            CategoryShare(
                category=category,
                total=amount,
                percent=(amount / grand_total * 100) if grand_total > 0 else 0.0,
            )
            for category, amount in totals.items()
        ]

    def _day_to_date(self, day: Optional[int]) -> Optional[dt.date]:
        if day is None:
            return None
        year, month = (int(part) for part in self.year_month.split("-"))
        return dt.date(year, month, day)


class TaskSummary(BaseModel):
    """Counts over a task list, as shown on the dashboard."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    by_status: dict[TaskStatus, int] = Field(default_factory=dict)
    by_priority: dict[TaskPriority, int] = Field(default_factory=dict)
    completion_rate: int = Field(
        default=0,
        ge=0,
        le=100,
        description="Completed share in whole percent, rounded half up"
    )

    @property
    def completed(self) -> int:
        return self.by_status.get(TaskStatus.COMPLETED, 0)

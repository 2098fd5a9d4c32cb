"""Report and list query package."""

from bizbook.queries.filters import (
    ExpenseFilter,
    TaskFilter,
    expense_vendor_names,
    filter_expenses,
    filter_tasks,
    sort_by_date_desc,
    summarize_tasks,
    task_categories,
)
from bizbook.queries.monthly import (
    InvalidMonthKeyError,
    available_months,
    default_month,
    month_key,
    monthly_report,
    parse_month_key,
    step_month,
)

__all__ = [
    "ExpenseFilter",
    "InvalidMonthKeyError",
    "TaskFilter",
    "available_months",
    "default_month",
    "expense_vendor_names",
    "filter_expenses",
    "filter_tasks",
    "month_key",
    "monthly_report",
    "parse_month_key",
    "sort_by_date_desc",
    "step_month",
    "summarize_tasks",
    "task_categories",
]

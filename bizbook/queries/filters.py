"""
List Filters and Summaries

Predicates and counts behind the task and expense list views.
All functions are pure and return new lists.
"""

import math
from typing import Iterable, Optional, Sequence, TypeVar

from pydantic import BaseModel

from bizbook.models.finance import Expense, Revenue
from bizbook.models.report import TaskSummary
from bizbook.models.task import Task, TaskPriority, TaskStatus


DatedT = TypeVar("DatedT", Expense, Revenue)


class TaskFilter(BaseModel):
    """
    Task list criteria. Unset criteria match every task; set criteria
    are combined with AND.
    """

    search: str = ""
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    category: Optional[str] = None

    def matches(self, task: Task) -> bool:
        if self.search:
            needle = self.search.lower()
            if needle not in task.title.lower() and needle not in task.description.lower():
                return False
        if self.status is not None and task.status != self.status:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        if self.category is not None and task.category != self.category:
            return False
        return True


class ExpenseFilter(BaseModel):
    """Expense list criteria: exact category and cached vendor name."""

    category: Optional[str] = None
    vendor_name: Optional[str] = None

    def matches(self, expense: Expense) -> bool:
        if self.category is not None and expense.category != self.category:
            return False
        if self.vendor_name is not None and expense.vendor_name != self.vendor_name:
            return False
        return True


def filter_tasks(tasks: Iterable[Task], criteria: Optional[TaskFilter] = None) -> list[Task]:
    criteria = criteria or TaskFilter()
    return [task for task in tasks if criteria.matches(task)]


def filter_expenses(
    expenses: Iterable[Expense],
    criteria: Optional[ExpenseFilter] = None,
) -> list[Expense]:
    criteria = criteria or ExpenseFilter()
    return [expense for expense in expenses if criteria.matches(expense)]


def task_categories(tasks: Iterable[Task]) -> list[str]:
    """Distinct task categories in first-seen order."""
    return list(dict.fromkeys(task.category for task in tasks))


def expense_vendor_names(expenses: Iterable[Expense]) -> list[str]:
    """Distinct non-empty cached vendor names in first-seen order."""
    return list(dict.fromkeys(e.vendor_name for e in expenses if e.vendor_name))


def sort_by_date_desc(records: Iterable[DatedT]) -> list[DatedT]:
    """Newest first; records on the same date keep their relative order."""
    return sorted(records, key=lambda record: record.date, reverse=True)


def summarize_tasks(tasks: Sequence[Task]) -> TaskSummary:
    """
    Status and priority counts for a task list.

    completion_rate is rounded half up to a whole percent.
    """
    by_status = {status: 0 for status in TaskStatus}
    by_priority = {priority: 0 for priority in TaskPriority}
    for task in tasks:
        by_status[task.status] += 1
        by_priority[task.priority] += 1

    total = len(tasks)
    rate = 0
    if total:
        rate = math.floor(by_status[TaskStatus.COMPLETED] / total * 100 + 0.5)

    return TaskSummary(
        total=total,
        by_status=by_status,
        by_priority=by_priority,
        completion_rate=rate,
    )

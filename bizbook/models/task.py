"""
Task Data Models for bizbook

Personal task records and the task store snapshot.
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from bizbook.models.finance import FinanceModel, IsoDate, PatchModel


class TaskPriority(str, Enum):
    """Task priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskStatus(str, Enum):
    """
    Task status.

    COMPLETED is reachable from any status through complete_task;
    a full edit may move a task anywhere.
    """
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskDraft(FinanceModel):
    """Task fields supplied by the caller."""

    title: str = Field(
        ...,
        description="Short task title"
    )
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: IsoDate
    category: str = Field(
        default="일반",
        description="Free-text category"
    )


class Task(TaskDraft):
    """A stored task."""

    id: str = Field(..., min_length=1)


class TaskPatch(PatchModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[IsoDate] = None
    category: Optional[str] = None


class TaskState(FinanceModel):
    """Complete task store snapshot, persisted under the task key."""

    tasks: tuple[Task, ...] = ()

"""
Task Store

Holds the personal task list. Tasks are independent of each other
and of the finance records.
"""

import datetime as dt
from typing import Any, Mapping, Optional, Union

from bizbook.audit import AuditLogger
from bizbook.models.audit import AuditEventBuilder
from bizbook.models.task import Task, TaskDraft, TaskPatch, TaskState, TaskStatus
from bizbook.services.storage import KeyValueStorageInterface
from bizbook.stores.base import IdFactory, PersistentStore, coerce_model, merge_patch
from bizbook.stores.seed import sample_task_state


class TaskStore(PersistentStore[TaskState]):
    """Record store for tasks."""

    state_model = TaskState
    default_key = "task-storage"

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        *,
        key: Optional[str] = None,
        seed: Optional[TaskState] = None,
        audit_logger: Optional[AuditLogger] = None,
        id_factory: Optional[IdFactory] = None,
        today: Optional[dt.date] = None,
    ):
        # Anchor for the relative due dates of the sample tasks.
        self._today = today
        super().__init__(
            storage,
            key=key,
            seed=seed,
            audit_logger=audit_logger,
            id_factory=id_factory,
        )

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._state.tasks

    def get_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self._state.tasks if t.id == task_id), None)

    def add_task(self, data: Union[TaskDraft, Mapping[str, Any]]) -> TaskState:
        draft = coerce_model(TaskDraft, data)
        task = Task(id=self._new_id(), **draft.model_dump())
        return self._commit(
            self._state.model_copy(update={"tasks": self._state.tasks + (task,)}),
            AuditEventBuilder.record_added(self._key, "task", task.id),
        )

    def update_task(
        self,
        task_id: str,
        patch: Union[TaskPatch, Mapping[str, Any]],
    ) -> TaskState:
        changes = coerce_model(TaskPatch, patch).changes()
        if self.get_task(task_id) is None:
            return self._ignore("update_task", "unknown id", "task", task_id)
        return self._commit(
            self._replace(task_id, changes),
            AuditEventBuilder.record_updated(self._key, "task", task_id, sorted(changes)),
        )

    def delete_task(self, task_id: str) -> TaskState:
        if self.get_task(task_id) is None:
            return self._ignore("delete_task", "unknown id", "task", task_id)
        tasks = tuple(t for t in self._state.tasks if t.id != task_id)
        return self._commit(
            self._state.model_copy(update={"tasks": tasks}),
            AuditEventBuilder.record_deleted(self._key, "task", task_id),
        )

    def complete_task(self, task_id: str) -> TaskState:
        """
        Set status to completed and touch nothing else.

        Idempotent: completing a completed task commits the same values.
        """
        task = self.get_task(task_id)
        if task is None:
            return self._ignore("complete_task", "unknown id", "task", task_id)
        return self._commit(
            self._replace(task_id, {"status": TaskStatus.COMPLETED}),
            AuditEventBuilder.task_completed(
                self._key, task_id, was_completed=task.status == TaskStatus.COMPLETED
            ),
        )

    def _replace(self, task_id: str, changes: dict[str, Any]) -> TaskState:
        tasks = tuple(
            merge_patch(t, changes) if t.id == task_id else t
            for t in self._state.tasks
        )
        return self._state.model_copy(update={"tasks": tasks})

    def _seed_state(self) -> TaskState:
        return sample_task_state(self._new_id, self._today)

    def _counts(self, state: TaskState) -> dict[str, int]:
        return {"tasks": len(state.tasks)}

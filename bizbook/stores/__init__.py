"""Record and task stores."""

from bizbook.stores.base import PersistentStore, merge_patch, new_id
from bizbook.stores.finance_store import FinanceStore
from bizbook.stores.seed import sample_finance_state, sample_task_state
from bizbook.stores.task_store import TaskStore

__all__ = [
    "FinanceStore",
    "PersistentStore",
    "TaskStore",
    "merge_patch",
    "new_id",
    "sample_finance_state",
    "sample_task_state",
]

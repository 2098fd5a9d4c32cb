"""
Shared fixtures for bizbook tests.

Stores are built on in-memory storage with deterministic ids and an
explicit empty seed, so the illustrative sample data never leaks into
tests that do not ask for it.
"""

import itertools
import time
from typing import Optional

import pytest

from bizbook.audit import AuditLogger
from bizbook.models import FinanceState, TaskState
from bizbook.services.storage import InMemoryStorage, StorageError
from bizbook.stores import FinanceStore, TaskStore


class FlakyStorage(InMemoryStorage):
    """In-memory storage whose writes fail while `failing` is set."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(initial)
        self.failing = False

    def set(self, key: str, value: str) -> None:
        if self.failing:
            raise StorageError("disk full")
        super().set(key, value)


@pytest.fixture
def seoul_time(monkeypatch):
    """Run with the process local time zone set to KST (UTC+9)."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    # POSIX TZ string, no tz database needed.
    monkeypatch.setenv("TZ", "KST-9")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def flaky_storage():
    return FlakyStorage()


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def audit_logger():
    return AuditLogger(history_size=100)


@pytest.fixture
def finance_store(storage, id_factory, audit_logger):
    return FinanceStore(
        storage,
        seed=FinanceState(),
        audit_logger=audit_logger,
        id_factory=id_factory,
    )


@pytest.fixture
def task_store(storage, id_factory, audit_logger):
    return TaskStore(
        storage,
        seed=TaskState(),
        audit_logger=audit_logger,
        id_factory=id_factory,
    )

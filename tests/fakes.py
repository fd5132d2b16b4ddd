# tests/fakes.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from divide_conquer.core.errors import InternalError
from divide_conquer.tasks.task_models import TaskDocument
from divide_conquer.tasks.task_store import InMemoryTaskStore


class FakeClock:
    """
    Deterministic clock for unit tests.

    Every call advances one second, so "later" timestamps always compare greater.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, tzinfo=UTC)
        self.calls = 0

    def __call__(self) -> str:
        value = self._now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        self._now += timedelta(seconds=1)
        self.calls += 1
        return value


class FailingTaskStore(InMemoryTaskStore):
    """In-memory store whose save() always fails like a full or read-only disk."""

    def save(self, doc: TaskDocument) -> None:
        raise InternalError("Failed to write task data: disk full")

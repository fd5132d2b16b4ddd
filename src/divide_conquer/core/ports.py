# src/divide_conquer/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The engine depends on a Protocol instead of a concrete store, so the JSON file
store can be swapped for an in-memory one in tests.
"""

from typing import Protocol

from ..tasks.task_models import LoadResult, TaskDocument


class TaskDocumentRepo(Protocol):
    """Single-document persistence: one checklist per storage location."""

    def read(self) -> LoadResult:
        """Load the document and report how it was obtained. Never raises."""
        ...

    def load(self) -> TaskDocument: ...

    def save(self, doc: TaskDocument) -> None:
        """Stamp updated_at, recompute progress (in place) and persist. Raises InternalError."""
        ...

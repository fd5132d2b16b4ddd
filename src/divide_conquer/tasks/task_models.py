# src/divide_conquer/tasks/task_models.py

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current instant as ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, raw: Any) -> Priority:
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"priority must be one of: {allowed}") from None

    @classmethod
    def from_stored(cls, raw: Any) -> Priority | None:
        """Tolerant parse for stored documents: unknown values are dropped, not fatal."""
        if raw is None:
            return None
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            logger.warning("Ignoring unknown stored priority %r", raw)
            return None


class LoadStatus(StrEnum):
    """
    How the store obtained the document it returned.

    Only FOUND carries persisted data. The other three all yield the
    default document; they are kept apart so callers and tests can tell
    a fresh start from a corrupt or unreadable file.
    """

    FOUND = "found"
    NOT_FOUND = "not_found"
    CORRUPT = "corrupt"
    UNREADABLE = "unreadable"


def _opt_str(data: dict[str, Any], key: str) -> str | None:
    val = data.get(key)
    if val is None:
        return None
    if isinstance(val, str):
        return val
    if isinstance(val, (int, float, bool)):
        logger.warning("Coercing stored %s=%r to a string", key, val)
        return str(val)
    raise ValueError(f"{key} must be a string")


def _str(data: dict[str, Any], key: str, default: str = "") -> str:
    val = _opt_str(data, key)
    return default if val is None else val


def _bool(data: dict[str, Any], key: str) -> bool:
    val = data.get(key)
    if val is None:
        return False
    if isinstance(val, bool):
        return val
    logger.warning("Coercing stored %s=%r to a boolean", key, val)
    if isinstance(val, str):
        return val.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(val)


def _list(data: dict[str, Any], key: str) -> list[Any]:
    val = data.get(key)
    if val is None:
        return []
    if not isinstance(val, list):
        raise ValueError(f"{key} must be a list")
    return val


def _dict(raw: Any, what: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError(f"{what} must be an object")
    return raw


@dataclass(slots=True)
class ChecklistItem:
    task: str
    detailed_description: str
    context_and_plan: str | None = None
    done: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "task": self.task,
            "detailed_description": self.detailed_description,
        }
        if self.context_and_plan is not None:
            out["context_and_plan"] = self.context_and_plan
        out["done"] = self.done
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> ChecklistItem:
        data = _dict(raw, "checklist item")
        return cls(
            task=_str(data, "task"),
            detailed_description=_str(data, "detailed_description"),
            context_and_plan=_opt_str(data, "context_and_plan"),
            done=_bool(data, "done"),
        )


@dataclass(slots=True)
class Note:
    timestamp: str
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "content": self.content}

    @classmethod
    def from_dict(cls, raw: Any) -> Note:
        data = _dict(raw, "note")
        return cls(timestamp=_str(data, "timestamp"), content=_str(data, "content"))


@dataclass(slots=True)
class Resource:
    name: str
    url: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.url, "description": self.description}

    @classmethod
    def from_dict(cls, raw: Any) -> Resource:
        data = _dict(raw, "resource")
        return cls(
            name=_str(data, "name"),
            url=_str(data, "url"),
            description=_str(data, "description"),
        )


@dataclass(frozen=True, slots=True)
class Progress:
    completed: int = 0
    total: int = 0
    percentage: int = 0

    @classmethod
    def from_checklist(cls, items: Iterable[ChecklistItem]) -> Progress:
        items = list(items)
        total = len(items)
        completed = sum(1 for item in items if item.done)
        # Round half up, not Python's banker's rounding.
        percentage = math.floor(completed * 100 / total + 0.5) if total > 0 else 0
        return cls(completed=completed, total=total, percentage=percentage)

    def to_dict(self) -> dict[str, int]:
        return {"completed": self.completed, "total": self.total, "percentage": self.percentage}


@dataclass(slots=True)
class Metadata:
    created_at: str
    updated_at: str
    progress: Progress = field(default_factory=Progress)
    tags: list[str] | None = None
    priority: Priority | None = None
    estimated_completion_time: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "progress": self.progress.to_dict(),
        }
        if self.tags is not None:
            out["tags"] = list(self.tags)
        if self.priority is not None:
            out["priority"] = self.priority.value
        if self.estimated_completion_time is not None:
            out["estimated_completion_time"] = self.estimated_completion_time
        return out

    @classmethod
    def from_dict(cls, raw: Any, *, now: str) -> Metadata:
        data = _dict(raw, "metadata")

        tags: list[str] | None = None
        if data.get("tags") is not None:
            raw_tags = _list(data, "tags")
            tags = [t for t in raw_tags if isinstance(t, str)]
            if len(tags) != len(raw_tags):
                logger.warning("Dropped %d non-string stored tags", len(raw_tags) - len(tags))

        priority = Priority.from_stored(data.get("priority"))

        # Stored progress is ignored: it is derived from the checklist on save.
        return cls(
            created_at=_str(data, "created_at", now),
            updated_at=_str(data, "updated_at", now),
            tags=tags,
            priority=priority,
            estimated_completion_time=_opt_str(data, "estimated_completion_time"),
        )


@dataclass(slots=True)
class TaskDocument:
    task_description: str
    metadata: Metadata
    checklist: list[ChecklistItem] = field(default_factory=list)
    context_for_all_tasks: str | None = ""
    notes: list[Note] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)

    def refresh_progress(self) -> Progress:
        self.metadata.progress = Progress.from_checklist(self.checklist)
        return self.metadata.progress

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "task_description": self.task_description,
            "checklist": [item.to_dict() for item in self.checklist],
        }
        if self.context_for_all_tasks is not None:
            out["context_for_all_tasks"] = self.context_for_all_tasks
        out["metadata"] = self.metadata.to_dict()
        out["notes"] = [n.to_dict() for n in self.notes]
        out["resources"] = [r.to_dict() for r in self.resources]
        return out

    @classmethod
    def from_dict(cls, raw: Any, *, now: str | None = None) -> TaskDocument:
        """
        Parse a stored document. Every field is optional; a missing field gets
        its default and a stray scalar value is coerced or dropped. Only
        structural breakage (a non-object document or item, a non-list
        collection) raises ValueError.
        """
        now = now or utc_now_iso()
        data = _dict(raw, "task document")

        meta_raw = data.get("metadata")
        metadata = Metadata.from_dict(meta_raw if meta_raw is not None else {}, now=now)

        doc = cls(
            task_description=_str(data, "task_description"),
            metadata=metadata,
            checklist=[ChecklistItem.from_dict(i) for i in _list(data, "checklist")],
            context_for_all_tasks=_opt_str(data, "context_for_all_tasks"),
            notes=[Note.from_dict(n) for n in _list(data, "notes")],
            resources=[Resource.from_dict(r) for r in _list(data, "resources")],
        )
        doc.refresh_progress()
        return doc


def default_document(now: str | None = None) -> TaskDocument:
    """Empty document: no description, no checklist, zero progress."""
    now = now or utc_now_iso()
    return TaskDocument(
        task_description="",
        metadata=Metadata(created_at=now, updated_at=now),
        context_for_all_tasks="",
    )


@dataclass(frozen=True, slots=True)
class LoadResult:
    status: LoadStatus
    document: TaskDocument
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.status is LoadStatus.FOUND

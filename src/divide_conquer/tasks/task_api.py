# src/divide_conquer/tasks/task_api.py

"""
Task document engine: every mutation of the checklist document.

Each operation is one read-modify-write cycle against the injected store:
validate arguments, load, validate indices against the loaded document,
mutate, save. Validation always completes before the first change, so a
rejected call never reaches save().
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.errors import InvalidParamsError
from ..core.ports import TaskDocumentRepo
from .task_models import (
    ChecklistItem,
    Metadata,
    Note,
    Priority,
    Resource,
    TaskDocument,
    default_document,
    utc_now_iso,
)
from .task_store import Clock
from .task_views import build_current_task_details, render_checklist_summary

logger = logging.getLogger(__name__)

_UNSET: Any = object()


# ---- argument helpers ----


def _required_str(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidParamsError(message)
    return value


def _optional_str(value: Any, name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidParamsError(f"{name} must be a string")
    return value


def _optional_bool(value: Any, name: str) -> bool | None:
    if value is None:
        return None
    if not isinstance(value, bool):
        raise InvalidParamsError(f"{name} must be a boolean")
    return value


def _as_int(value: Any) -> int | None:
    """JSON numbers may arrive as 2.0; booleans are never indices."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _index(value: Any, label: str) -> int:
    idx = _as_int(value)
    if idx is None:
        raise InvalidParamsError(f"Invalid {label}: {value!r}")
    return idx


def _check_item_index(doc: TaskDocument, index: int, label: str = "index") -> None:
    if index < 0 or index >= len(doc.checklist):
        raise InvalidParamsError(f"Invalid {label}: {index}")


def _tags(value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        raise InvalidParamsError("tags must be a list of strings")
    return list(value)


def _priority(value: Any) -> Priority:
    try:
        return Priority.parse(value)
    except ValueError as e:
        raise InvalidParamsError(str(e)) from None


def _checklist_item(raw: Any, position: int) -> ChecklistItem:
    if not isinstance(raw, Mapping):
        raise InvalidParamsError(f"initial_checklist[{position}] must be an object")
    if not raw.get("task") or not raw.get("detailed_description"):
        raise InvalidParamsError(
            f"initial_checklist[{position}]: task and detailed description are required"
        )
    return ChecklistItem(
        task=_required_str(raw.get("task"), f"initial_checklist[{position}].task must be a string"),
        detailed_description=_required_str(
            raw.get("detailed_description"),
            f"initial_checklist[{position}].detailed_description must be a string",
        ),
        context_and_plan=_optional_str(raw.get("context_and_plan"), "context_and_plan"),
        done=bool(_optional_bool(raw.get("done"), "done")),
    )


class TaskService:
    """
    Operations over the single task document.

    The store is injected; nothing is cached between calls, so each call
    observes the latest persisted state.
    """

    def __init__(self, store: TaskDocumentRepo, *, clock: Clock = utc_now_iso) -> None:
        self._store = store
        self._clock = clock

    # ---- whole document ----

    def initialize_task(
        self,
        task_description: Any = None,
        context_for_all_tasks: Any = None,
        initial_checklist: Any = None,
        metadata: Any = None,
    ) -> str:
        """
        Replace the whole document. Notes and resources start empty; only
        tags/priority/estimated_completion_time are taken from `metadata`,
        timestamps and progress are always computed here.
        """
        description = _required_str(task_description, "Task description is required")
        context = _optional_str(context_for_all_tasks, "context_for_all_tasks") or ""

        if initial_checklist is None:
            initial_checklist = []
        if not isinstance(initial_checklist, list):
            raise InvalidParamsError("initial_checklist must be a list")
        items = [_checklist_item(raw, i) for i, raw in enumerate(initial_checklist)]

        now = self._clock()
        meta = Metadata(created_at=now, updated_at=now)
        if metadata is not None:
            if not isinstance(metadata, Mapping):
                raise InvalidParamsError("metadata must be an object")
            self._apply_metadata_patch(
                meta,
                tags=metadata.get("tags", _UNSET),
                priority=metadata.get("priority", _UNSET),
                estimated_completion_time=metadata.get("estimated_completion_time", _UNSET),
            )

        doc = TaskDocument(
            task_description=description,
            metadata=meta,
            checklist=items,
            context_for_all_tasks=context,
        )
        self._store.save(doc)
        logger.info("Task initialized items=%d", len(items))
        return "Task initialized successfully."

    def update_task_description(self, task_description: Any = None) -> str:
        description = _required_str(task_description, "Task description is required")
        doc = self._store.load()
        doc.task_description = description
        self._store.save(doc)
        return "Task description updated successfully."

    def update_context(self, context_for_all_tasks: Any = None) -> str:
        context = _required_str(context_for_all_tasks, "Context for all tasks is required")
        doc = self._store.load()
        doc.context_for_all_tasks = context
        self._store.save(doc)
        return "Context updated successfully."

    def clear_task(self) -> str:
        self._store.save(default_document(self._clock()))
        logger.info("Task cleared.")
        return "Task cleared successfully."

    # ---- checklist ----

    def add_checklist_item(
        self,
        task: Any = None,
        detailed_description: Any = None,
        context_and_plan: Any = None,
        done: Any = None,
        position: Any = None,
    ) -> str:
        if not task or not detailed_description:
            raise InvalidParamsError("Task and detailed description are required")
        item = ChecklistItem(
            task=_required_str(task, "task must be a string"),
            detailed_description=_required_str(
                detailed_description, "detailed_description must be a string"
            ),
            context_and_plan=_optional_str(context_and_plan, "context_and_plan"),
            done=bool(_optional_bool(done, "done")),
        )

        doc = self._store.load()
        pos = _as_int(position)
        if pos is not None and 0 <= pos <= len(doc.checklist):
            doc.checklist.insert(pos, item)
        else:
            doc.checklist.append(item)
        self._store.save(doc)
        return "Checklist item added successfully."

    def update_checklist_item(
        self,
        index: Any = None,
        task: Any = _UNSET,
        detailed_description: Any = _UNSET,
        context_and_plan: Any = _UNSET,
        done: Any = _UNSET,
    ) -> str:
        """Partial update: only the fields that were passed change."""
        if index is None:
            raise InvalidParamsError("Index is required")
        idx = _index(index, "index")

        # Build the patch before touching the document.
        patch: dict[str, Any] = {}
        if task is not _UNSET and task is not None:
            patch["task"] = _required_str(task, "task must be a non-empty string")
        if detailed_description is not _UNSET and detailed_description is not None:
            patch["detailed_description"] = _required_str(
                detailed_description, "detailed_description must be a non-empty string"
            )
        # null clears the plan, matching update_metadata
        if context_and_plan is not _UNSET:
            patch["context_and_plan"] = _optional_str(context_and_plan, "context_and_plan")
        if done is not _UNSET and done is not None:
            patch["done"] = _optional_bool(done, "done")

        doc = self._store.load()
        _check_item_index(doc, idx)

        item = doc.checklist[idx]
        for name, value in patch.items():
            setattr(item, name, value)
        self._store.save(doc)
        return "Checklist item updated successfully."

    def mark_task_done(self, index: Any = None) -> str:
        self._set_done(index, True)
        return "Task marked as done."

    def mark_task_undone(self, index: Any = None) -> str:
        self._set_done(index, False)
        return "Task marked as not done."

    def _set_done(self, index: Any, done: bool) -> None:
        if index is None:
            raise InvalidParamsError("Index is required")
        idx = _index(index, "index")
        doc = self._store.load()
        _check_item_index(doc, idx)
        doc.checklist[idx].done = done
        self._store.save(doc)

    def remove_checklist_item(self, index: Any = None) -> str:
        if index is None:
            raise InvalidParamsError("Index is required")
        idx = _index(index, "index")
        doc = self._store.load()
        _check_item_index(doc, idx)
        removed = doc.checklist.pop(idx)
        self._store.save(doc)
        logger.debug("Checklist item removed index=%d task=%r", idx, removed.task)
        return "Checklist item removed successfully."

    def reorder_checklist_item(self, from_index: Any = None, to_index: Any = None) -> str:
        """
        Move an item: remove it, then insert at to_index in the shortened list.

        Both bounds are checked against the list before removal, so to_index
        may equal len(checklist); insert() then appends.
        """
        if from_index is None or to_index is None:
            raise InvalidParamsError("From index and to index are required")
        src = _index(from_index, "from index")
        dst = _index(to_index, "to index")

        doc = self._store.load()
        _check_item_index(doc, src, "from index")
        if dst < 0 or dst > len(doc.checklist):
            raise InvalidParamsError(f"Invalid to index: {dst}")

        item = doc.checklist.pop(src)
        doc.checklist.insert(dst, item)
        self._store.save(doc)
        return "Checklist item reordered successfully."

    # ---- notes / resources ----

    def add_note(self, content: Any = None) -> str:
        text = _required_str(content, "Note content is required")
        doc = self._store.load()
        doc.notes.append(Note(timestamp=self._clock(), content=text))
        self._store.save(doc)
        return "Note added successfully."

    def add_resource(self, name: Any = None, url: Any = None, description: Any = None) -> str:
        if not name or not url:
            raise InvalidParamsError("Resource name and URL are required")
        resource = Resource(
            name=_required_str(name, "name must be a string"),
            url=_required_str(url, "url must be a string"),
            description=_optional_str(description, "description") or "",
        )
        doc = self._store.load()
        doc.resources.append(resource)
        self._store.save(doc)
        return "Resource added successfully."

    # ---- metadata ----

    def update_metadata(
        self,
        tags: Any = _UNSET,
        priority: Any = _UNSET,
        estimated_completion_time: Any = _UNSET,
    ) -> str:
        provided = [v for v in (tags, priority, estimated_completion_time) if v is not _UNSET]
        if not provided:
            return "No metadata fields provided; nothing changed."

        # Validate against a scratch record first so a bad field changes nothing.
        self._apply_metadata_patch(
            Metadata(created_at="", updated_at=""),
            tags=tags,
            priority=priority,
            estimated_completion_time=estimated_completion_time,
        )

        doc = self._store.load()
        self._apply_metadata_patch(
            doc.metadata,
            tags=tags,
            priority=priority,
            estimated_completion_time=estimated_completion_time,
        )
        self._store.save(doc)
        return "Metadata updated successfully."

    @staticmethod
    def _apply_metadata_patch(
        meta: Metadata,
        *,
        tags: Any,
        priority: Any,
        estimated_completion_time: Any,
    ) -> None:
        """
        Field-by-field patch. _UNSET keeps the current value; an explicit
        None clears an optional field. created_at, updated_at and progress
        are never touched here.
        """
        if tags is not _UNSET:
            meta.tags = None if tags is None else _tags(tags)
        if priority is not _UNSET:
            meta.priority = None if priority is None else _priority(priority)
        if estimated_completion_time is not _UNSET:
            meta.estimated_completion_time = _optional_str(
                estimated_completion_time, "estimated_completion_time"
            )

    # ---- read views ----

    def get_checklist_summary(self, include_descriptions: Any = False) -> str:
        doc = self._store.load()
        return render_checklist_summary(doc, include_descriptions=bool(include_descriptions))

    def get_current_task_details(self) -> dict[str, Any]:
        return build_current_task_details(self._store.load())

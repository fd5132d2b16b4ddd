# src/divide_conquer/tasks/task_views.py

"""
Read-only views over a task document.

Both views keep the agent's context window small: the summary never shows
context_and_plan, and the details view shows it only for the current item.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .task_models import ChecklistItem, Progress, TaskDocument

NO_CURRENT_TASK = -1

ULTIMATE_GOAL_NOTE = "This is the final goal of the entire task, not just the current step."


def current_task_index(checklist: Sequence[ChecklistItem]) -> int:
    """Index of the first item not done, or NO_CURRENT_TASK."""
    for i, item in enumerate(checklist):
        if not item.done:
            return i
    return NO_CURRENT_TASK


def render_checklist_summary(doc: TaskDocument, *, include_descriptions: bool = False) -> str:
    progress = Progress.from_checklist(doc.checklist)

    parts = [f"# Task: {doc.task_description}\n\n"]
    if doc.context_for_all_tasks:
        parts.append(f"## Context\n\n{doc.context_for_all_tasks}\n\n")
    parts.append(f"## Progress: {progress.completed}/{progress.total} ({progress.percentage}%)\n\n")
    parts.append("## Checklist\n\n")

    for i, item in enumerate(doc.checklist):
        checkbox = "[x]" if item.done else "[ ]"
        parts.append(f"{i}. {checkbox} {item.task}\n")
        if include_descriptions and item.detailed_description:
            description = item.detailed_description.replace("\n", "\n     ")
            parts.append(f"   - Description: {description}\n")

    return "".join(parts)


def _task_view(index: int, item: ChecklistItem, *, is_current: bool) -> dict[str, Any]:
    view: dict[str, Any] = {
        "index": index,
        "task": item.task,
        "detailed_description": item.detailed_description,
    }
    if is_current and item.context_and_plan is not None:
        view["context_and_plan"] = item.context_and_plan
    view["done"] = item.done
    view["is_current"] = is_current
    return view


def build_current_task_details(doc: TaskDocument) -> dict[str, Any]:
    current = current_task_index(doc.checklist)
    metadata = doc.metadata.to_dict()
    metadata["progress"] = Progress.from_checklist(doc.checklist).to_dict()

    return {
        "ultimate_goal": {
            "description": doc.task_description,
            "note": ULTIMATE_GOAL_NOTE,
        },
        "current_task_index": current,
        "tasks": [
            _task_view(i, item, is_current=(i == current)) for i, item in enumerate(doc.checklist)
        ],
        "context_for_all_tasks": doc.context_for_all_tasks or "",
        "progress": metadata["progress"],
        "metadata": metadata,
        "notes": [n.to_dict() for n in doc.notes],
        "resources": [r.to_dict() for r in doc.resources],
    }

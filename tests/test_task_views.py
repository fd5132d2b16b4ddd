# tests/test_task_views.py

from __future__ import annotations

from divide_conquer.tasks.task_models import ChecklistItem, Note, Resource, default_document
from divide_conquer.tasks.task_views import (
    NO_CURRENT_TASK,
    build_current_task_details,
    current_task_index,
    render_checklist_summary,
)


def _doc(*items: ChecklistItem, context: str = ""):
    doc = default_document("2024-01-01T00:00:00.000Z")
    doc.task_description = "Refactor the parser"
    doc.context_for_all_tasks = context
    doc.checklist = list(items)
    return doc


def _item(label: str, done: bool = False, plan: str | None = None) -> ChecklistItem:
    return ChecklistItem(task=label, detailed_description=f"{label} details", context_and_plan=plan, done=done)


def test_current_task_index_is_first_not_done() -> None:
    assert current_task_index([]) == NO_CURRENT_TASK
    assert current_task_index([_item("a", True), _item("b", True)]) == NO_CURRENT_TASK
    assert current_task_index([_item("a", True), _item("b"), _item("c")]) == 1
    # Order matters, not neighbours: a later undone item does not move the pointer.
    assert current_task_index([_item("a"), _item("b", True)]) == 0


def test_summary_layout() -> None:
    doc = _doc(_item("a", True, plan="secret plan"), _item("b"), context="Use uv")
    assert render_checklist_summary(doc) == (
        "# Task: Refactor the parser\n\n"
        "## Context\n\nUse uv\n\n"
        "## Progress: 1/2 (50%)\n\n"
        "## Checklist\n\n"
        "0. [x] a\n"
        "1. [ ] b\n"
    )


def test_summary_with_descriptions_indents_continuation_lines() -> None:
    doc = _doc(
        ChecklistItem(task="a", detailed_description="line one\nline two", context_and_plan="plan")
    )
    out = render_checklist_summary(doc, include_descriptions=True)
    assert "0. [ ] a\n   - Description: line one\n     line two\n" in out
    assert "plan" not in out


def test_details_only_current_item_carries_plan() -> None:
    doc = _doc(_item("a", True, "plan a"), _item("b", plan="plan b"), _item("c", plan="plan c"))
    doc.notes.append(Note(timestamp="t", content="remember"))
    doc.resources.append(Resource(name="r", url="u"))

    details = build_current_task_details(doc)

    assert details["ultimate_goal"]["description"] == "Refactor the parser"
    assert "final goal" in details["ultimate_goal"]["note"]
    assert details["current_task_index"] == 1
    assert [t["index"] for t in details["tasks"]] == [0, 1, 2]
    assert [t["is_current"] for t in details["tasks"]] == [False, True, False]
    assert details["tasks"][1]["context_and_plan"] == "plan b"
    assert all("context_and_plan" not in t for i, t in enumerate(details["tasks"]) if i != 1)
    assert details["notes"] == [{"timestamp": "t", "content": "remember"}]
    assert details["resources"] == [{"name": "r", "url": "u", "description": ""}]
    assert details["metadata"]["created_at"] == "2024-01-01T00:00:00.000Z"


def test_details_when_everything_is_done() -> None:
    details = build_current_task_details(_doc(_item("a", True, "p"), _item("b", True, "p")))
    assert details["current_task_index"] == NO_CURRENT_TASK
    assert all(not t["is_current"] for t in details["tasks"])
    assert all("context_and_plan" not in t for t in details["tasks"])
    assert details["progress"] == {"completed": 2, "total": 2, "percentage": 100}


def test_details_current_item_without_plan() -> None:
    details = build_current_task_details(_doc(_item("a")))
    assert details["tasks"][0]["is_current"] is True
    assert "context_and_plan" not in details["tasks"][0]


def test_details_empty_document() -> None:
    details = build_current_task_details(default_document())
    assert details["current_task_index"] == NO_CURRENT_TASK
    assert details["tasks"] == []
    assert details["context_for_all_tasks"] == ""
    assert details["progress"] == {"completed": 0, "total": 0, "percentage": 0}

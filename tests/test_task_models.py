# tests/test_task_models.py

from __future__ import annotations

import pytest

from divide_conquer.tasks.task_models import (
    ChecklistItem,
    Metadata,
    Priority,
    Progress,
    TaskDocument,
    default_document,
    utc_now_iso,
)


def _items(*done: bool) -> list[ChecklistItem]:
    return [ChecklistItem(task=f"t{i}", detailed_description="d", done=d) for i, d in enumerate(done)]


@pytest.mark.parametrize(
    ("done", "expected"),
    [
        ((), Progress(0, 0, 0)),
        ((True, False, False), Progress(1, 3, 33)),
        ((True, True, False), Progress(2, 3, 67)),
        ((True, False), Progress(1, 2, 50)),
        ((True,) + (False,) * 7, Progress(1, 8, 13)),  # 12.5 rounds up
        ((True, True), Progress(2, 2, 100)),
    ],
)
def test_progress_from_checklist(done, expected) -> None:
    assert Progress.from_checklist(_items(*done)) == expected


def test_default_document_is_empty() -> None:
    doc = default_document("2024-01-01T00:00:00.000Z")
    assert doc.task_description == ""
    assert doc.context_for_all_tasks == ""
    assert doc.checklist == [] and doc.notes == [] and doc.resources == []
    assert doc.metadata.created_at == doc.metadata.updated_at == "2024-01-01T00:00:00.000Z"
    assert doc.metadata.progress == Progress(0, 0, 0)


def test_to_dict_omits_unset_optionals() -> None:
    doc = default_document("2024-01-01T00:00:00.000Z")
    doc.checklist.append(ChecklistItem(task="a", detailed_description="b"))
    data = doc.to_dict()

    assert data["checklist"] == [{"task": "a", "detailed_description": "b", "done": False}]
    assert set(data["metadata"]) == {"created_at", "updated_at", "progress"}
    assert data["notes"] == [] and data["resources"] == []


def test_from_dict_defaults_missing_fields() -> None:
    doc = TaskDocument.from_dict(
        {"task_description": "Goal", "checklist": [{"task": "a", "done": True}]},
        now="2024-02-02T00:00:00.000Z",
    )
    assert doc.task_description == "Goal"
    assert doc.context_for_all_tasks is None
    assert doc.checklist[0].detailed_description == ""
    assert doc.metadata.created_at == "2024-02-02T00:00:00.000Z"
    assert doc.metadata.progress == Progress(1, 1, 100)
    assert doc.notes == [] and doc.resources == []


def test_from_dict_ignores_stored_progress() -> None:
    doc = TaskDocument.from_dict(
        {
            "checklist": [{"task": "a", "detailed_description": "b", "done": False}],
            "metadata": {"progress": {"completed": 9, "total": 9, "percentage": 100}},
        }
    )
    assert doc.metadata.progress == Progress(0, 1, 0)


@pytest.mark.parametrize(
    "raw",
    [
        [],
        {"checklist": "not a list"},
        {"checklist": ["not an object"]},
        {"metadata": "not an object"},
        {"metadata": {"tags": "not a list"}},
        {"task_description": {"nested": True}},
    ],
)
def test_from_dict_rejects_wrong_types(raw) -> None:
    with pytest.raises(ValueError):
        TaskDocument.from_dict(raw)


def test_from_dict_defaults_unknown_priority(caplog) -> None:
    doc = TaskDocument.from_dict({"metadata": {"priority": "urgent"}, "checklist": [{"task": "a"}]})
    assert doc.metadata.priority is None
    assert len(doc.checklist) == 1
    assert "urgent" in caplog.text

    assert Metadata.from_dict({"priority": "HIGH"}, now="n").priority is Priority.HIGH


@pytest.mark.parametrize(
    ("stored", "expected"),
    [("yes", True), ("true", True), ("no", False), ("", False), (1, True), (0, False)],
)
def test_from_dict_coerces_stored_done(stored, expected: bool) -> None:
    doc = TaskDocument.from_dict({"checklist": [{"task": "a", "done": stored}]})
    assert doc.checklist[0].done is expected


def test_from_dict_coerces_scalar_strings() -> None:
    doc = TaskDocument.from_dict(
        {"task_description": 42, "checklist": [{"task": 7, "detailed_description": True}]}
    )
    assert doc.task_description == "42"
    assert doc.checklist[0].task == "7"
    assert doc.checklist[0].detailed_description == "True"


def test_from_dict_drops_non_string_tags(caplog) -> None:
    meta = Metadata.from_dict({"tags": ["a", 1, None, "b", {"x": 1}]}, now="n")
    assert meta.tags == ["a", "b"]
    assert "Dropped 3 non-string stored tags" in caplog.text


def test_metadata_round_trip_keeps_optionals() -> None:
    meta = Metadata(
        created_at="c",
        updated_at="u",
        tags=["x", "y"],
        priority=Priority.HIGH,
        estimated_completion_time="2h",
    )
    data = meta.to_dict()
    assert data["priority"] == "high"
    again = Metadata.from_dict(data, now="n")
    assert again.tags == ["x", "y"]
    assert again.priority is Priority.HIGH
    assert again.estimated_completion_time == "2h"


def test_utc_now_iso_format() -> None:
    ts = utc_now_iso()
    assert ts.endswith("Z")
    assert len(ts) == len("2024-01-01T00:00:00.000Z")

# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from divide_conquer.core.state import AppState
from divide_conquer.tasks.task_api import TaskService
from divide_conquer.tasks.task_store import InMemoryTaskStore, JsonFileTaskStore

from .fakes import FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the connectors.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the user's environment and home directory.
    """
    return SimpleNamespace(
        app_name="divide-conquer-test",
        log_level="DEBUG",
        log_to_file=False,
        console_enabled=False,
        data_dir=tmp_path,
        task_file_path=tmp_path / "cfg" / "divide_and_conquer.json",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def json_store(settings: SimpleNamespace, clock: FakeClock) -> JsonFileTaskStore:
    """Real file store: its on-disk behaviour is part of what we test."""
    return JsonFileTaskStore(settings.task_file_path, clock=clock)


@pytest.fixture()
def memory_store(clock: FakeClock) -> InMemoryTaskStore:
    return InMemoryTaskStore(clock=clock)


@pytest.fixture()
def service(json_store: JsonFileTaskStore, clock: FakeClock) -> TaskService:
    return TaskService(json_store, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, json_store: JsonFileTaskStore) -> AppState:
    return AppState(settings=settings, store=json_store)


def add_items(service: TaskService, *labels: str) -> None:
    for label in labels:
        service.add_checklist_item(
            task=label,
            detailed_description=f"Do {label}",
            context_and_plan=f"Plan for {label}",
        )

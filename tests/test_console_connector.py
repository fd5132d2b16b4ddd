# tests/test_console_connector.py

from __future__ import annotations

from divide_conquer.connectors.console_connector import handle_console_line, run_console_loop
from divide_conquer.core.state import AppState


def test_console_calls_tools_with_json_arguments(state: AppState) -> None:
    out = handle_console_line(state, '/add_checklist_item {"task": "A", "detailed_description": "a"}')
    assert out == "Checklist item added successfully."
    assert handle_console_line(state, "/get_checklist_summary").endswith("0. [ ] A\n")


def test_console_reports_errors(state: AppState) -> None:
    assert handle_console_line(state, "/mark_task_done {\"index\": 3}") == "[ERROR] Invalid index: 3"
    assert "not valid JSON" in (handle_console_line(state, "/add_note {oops") or "")
    assert "Unknown tool: nope" in (handle_console_line(state, "/nope") or "")
    assert handle_console_line(state, "   ") is None
    assert "/help" in (handle_console_line(state, "hello") or "")


def test_console_help() -> None:
    out = handle_console_line(None, "/help")  # type: ignore[arg-type]
    assert out is not None and "/initialize_task" in out


def test_console_loop_until_exit(state: AppState, capsys) -> None:
    lines = iter(['/add_note {"content": "hi"}', "/exit", "/add_note {\"content\": \"never\"}"])
    run_console_loop(state, read_line=lambda _prompt: next(lines))

    assert [n.content for n in state.store.load().notes] == ["hi"]
    assert "Note added successfully." in capsys.readouterr().out

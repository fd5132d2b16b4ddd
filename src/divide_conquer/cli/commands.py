# src/divide_conquer/cli/commands.py

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ..core.errors import InvalidParamsError, TaskError, UnknownToolError
from ..core.state import AppState
from ..tasks.task_api import TaskService

ToolHandler = Callable[[TaskService, dict[str, Any]], str | dict[str, Any]]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolResult:
    text: str
    is_error: bool = False
    error_code: str | None = None


@dataclass(frozen=True, slots=True)
class _Tool:
    name: str
    handler: ToolHandler
    description: str
    input_schema: dict[str, Any]
    action: str


class ToolRegistry:
    """Named-tool registry used by connectors (stdio JSON-RPC, console)."""

    def __init__(self) -> None:
        self._tools: dict[str, _Tool] = {}

    def register(
        self,
        name: str,
        handler: ToolHandler,
        description: str,
        input_schema: dict[str, Any] | None = None,
        action: str | None = None,
    ) -> None:
        """
        `action` names the operation in error messages ("Error <action>: ...");
        it defaults to the tool name with underscores as spaces.
        """
        self._tools[name] = _Tool(
            name=name,
            handler=handler,
            description=description,
            input_schema=input_schema or {"type": "object", "properties": {}},
            action=action or name.replace("_", " "),
        )

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[dict[str, Any]]:
        return [
            {"name": t.name, "description": t.description, "inputSchema": t.input_schema}
            for t in self._tools.values()
        ]

    def call(
        self,
        state: AppState,
        name: str,
        arguments: Mapping[str, Any] | None = None,
    ) -> ToolResult:
        """
        Run one tool against a fresh TaskService bound to state.store.

        Raises UnknownToolError for names that are not registered; every
        other failure comes back as a ToolResult with is_error=True.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(f"Unknown tool: {name}")

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            return ToolResult(
                "Arguments must be a JSON object.", is_error=True, error_code=InvalidParamsError.code
            )

        service = TaskService(state.store)
        try:
            out = tool.handler(service, dict(arguments))
        except InvalidParamsError as e:
            logger.info("Tool %s rejected: %s", name, e.message)
            return ToolResult(e.message, is_error=True, error_code=e.code)
        except TaskError as e:
            logger.error("Tool %s failed: %s", name, e.message)
            return ToolResult(f"Error {tool.action}: {e.message}", is_error=True, error_code=e.code)
        except Exception as e:
            logger.exception("Tool %s crashed.", name)
            return ToolResult(f"Error {tool.action}: {e}", is_error=True, error_code="internal_error")

        if isinstance(out, str):
            return ToolResult(out)
        return ToolResult(json.dumps(out, ensure_ascii=False, indent=2))

    def build_help(self) -> str:
        lines = ["Available tools:"]
        for t in self._tools.values():
            lines.append(f"  /{t.name} - {t.description}")
        lines.append("Call a tool with: /<tool> {\"arg\": \"value\", ...}")
        return "\n".join(lines)


registry = ToolRegistry()


# ---- input schemas ----

_ITEM_PROPERTIES: dict[str, Any] = {
    "task": {
        "type": "string",
        "description": "A short yet comprehensive name for the task",
    },
    "detailed_description": {
        "type": "string",
        "description": "A longer description about what we want to achieve with this task",
    },
    "context_and_plan": {
        "type": "string",
        "description": (
            "Related information, files the agent should read, and more details from "
            "other tasks, as well as a detailed plan for this task"
        ),
    },
    "done": {
        "type": "boolean",
        "description": "Whether the task is already completed",
        "default": False,
    },
}

_METADATA_PROPERTIES: dict[str, Any] = {
    "tags": {
        "type": "array",
        "items": {"type": "string"},
        "description": "Tags to categorize the task",
    },
    "priority": {
        "type": "string",
        "enum": ["high", "medium", "low"],
        "description": "Priority level of the task",
    },
    "estimated_completion_time": {
        "type": "string",
        "description": "Estimated completion time (ISO timestamp or duration)",
    },
}


def _index_schema(description: str) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {"index": {"type": "number", "description": description}},
        "required": ["index"],
    }


def _pick(args: dict[str, Any], *names: str) -> dict[str, Any]:
    """Only the keys the caller actually sent; absent keys keep engine defaults."""
    return {n: args[n] for n in names if n in args}


# ---- registrations ----

registry.register(
    "initialize_task",
    lambda svc, a: svc.initialize_task(
        **_pick(a, "task_description", "context_for_all_tasks", "initial_checklist", "metadata")
    ),
    "Creates a new task with the specified description and optional initial checklist items.",
    {
        "type": "object",
        "properties": {
            "task_description": {
                "type": "string",
                "description": "A medium-level detailed description about the whole task",
            },
            "context_for_all_tasks": {
                "type": "string",
                "description": "Information that all tasks in the checklist should include",
            },
            "initial_checklist": {
                "type": "array",
                "description": "Optional initial checklist items",
                "items": {
                    "type": "object",
                    "properties": _ITEM_PROPERTIES,
                    "required": ["task", "detailed_description"],
                },
            },
            "metadata": {
                "type": "object",
                "description": "Optional metadata for the task",
                "properties": _METADATA_PROPERTIES,
            },
        },
        "required": ["task_description"],
    },
    action="initializing task",
)

registry.register(
    "update_task_description",
    lambda svc, a: svc.update_task_description(**_pick(a, "task_description")),
    "Updates the main task description.",
    {
        "type": "object",
        "properties": {
            "task_description": {"type": "string", "description": "The new task description"}
        },
        "required": ["task_description"],
    },
    action="updating task description",
)

registry.register(
    "update_context",
    lambda svc, a: svc.update_context(**_pick(a, "context_for_all_tasks")),
    "Updates the context information for all tasks.",
    {
        "type": "object",
        "properties": {
            "context_for_all_tasks": {
                "type": "string",
                "description": "The new context information for all tasks",
            }
        },
        "required": ["context_for_all_tasks"],
    },
    action="updating context",
)

registry.register(
    "add_checklist_item",
    lambda svc, a: svc.add_checklist_item(
        **_pick(a, "task", "detailed_description", "context_and_plan", "done", "position")
    ),
    "Adds a new item to the checklist.",
    {
        "type": "object",
        "properties": {
            **_ITEM_PROPERTIES,
            "position": {
                "type": "number",
                "description": (
                    "Optional position to insert the task (0-based index). "
                    "If not provided, the task will be added at the end."
                ),
            },
        },
        "required": ["task", "detailed_description"],
    },
    action="adding checklist item",
)

registry.register(
    "update_checklist_item",
    lambda svc, a: svc.update_checklist_item(
        **_pick(a, "index", "task", "detailed_description", "context_and_plan", "done")
    ),
    "Updates an existing checklist item.",
    {
        "type": "object",
        "properties": {
            "index": {
                "type": "number",
                "description": "The index of the checklist item to update (0-based)",
            },
            **{k: v for k, v in _ITEM_PROPERTIES.items() if k != "done"},
            "done": {"type": "boolean", "description": "Whether the task is completed"},
        },
        "required": ["index"],
    },
    action="updating checklist item",
)

registry.register(
    "mark_task_done",
    lambda svc, a: svc.mark_task_done(**_pick(a, "index")),
    "Marks a checklist item as done.",
    _index_schema("The index of the checklist item to mark as done (0-based)"),
    action="marking task as done",
)

registry.register(
    "mark_task_undone",
    lambda svc, a: svc.mark_task_undone(**_pick(a, "index")),
    "Marks a checklist item as not done.",
    _index_schema("The index of the checklist item to mark as not done (0-based)"),
    action="marking task as not done",
)

registry.register(
    "remove_checklist_item",
    lambda svc, a: svc.remove_checklist_item(**_pick(a, "index")),
    "Removes a checklist item.",
    _index_schema("The index of the checklist item to remove (0-based)"),
    action="removing checklist item",
)

registry.register(
    "reorder_checklist_item",
    lambda svc, a: svc.reorder_checklist_item(**_pick(a, "from_index", "to_index")),
    "Moves a checklist item to a new position.",
    {
        "type": "object",
        "properties": {
            "from_index": {
                "type": "number",
                "description": "The current index of the checklist item (0-based)",
            },
            "to_index": {
                "type": "number",
                "description": "The new index for the checklist item (0-based)",
            },
        },
        "required": ["from_index", "to_index"],
    },
    action="reordering checklist item",
)

registry.register(
    "add_note",
    lambda svc, a: svc.add_note(**_pick(a, "content")),
    "Adds a note to the task.",
    {
        "type": "object",
        "properties": {"content": {"type": "string", "description": "The content of the note"}},
        "required": ["content"],
    },
    action="adding note",
)

registry.register(
    "add_resource",
    lambda svc, a: svc.add_resource(**_pick(a, "name", "url", "description")),
    "Adds a resource to the task.",
    {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Name of the resource"},
            "url": {"type": "string", "description": "URL or file path of the resource"},
            "description": {"type": "string", "description": "Description of the resource"},
        },
        "required": ["name", "url"],
    },
    action="adding resource",
)

registry.register(
    "update_metadata",
    lambda svc, a: svc.update_metadata(
        **_pick(a, "tags", "priority", "estimated_completion_time")
    ),
    "Updates the task metadata.",
    {"type": "object", "properties": _METADATA_PROPERTIES},
    action="updating metadata",
)

registry.register(
    "clear_task",
    lambda svc, a: svc.clear_task(),
    "Clears the current task data.",
    {"type": "object", "properties": {}, "required": []},
    action="clearing task",
)

registry.register(
    "get_checklist_summary",
    lambda svc, a: svc.get_checklist_summary(**_pick(a, "include_descriptions")),
    "Returns a summary of the checklist with completion status.",
    {
        "type": "object",
        "properties": {
            "include_descriptions": {
                "type": "boolean",
                "description": "Whether to include detailed descriptions in the summary",
                "default": False,
            }
        },
    },
    action="getting checklist summary",
)

registry.register(
    "get_current_task_details",
    lambda svc, a: svc.get_current_task_details(),
    (
        "Retrieves details of the current task (first uncompleted task) with full context. "
        "This is the recommended tool to use when working with tasks."
    ),
    {"type": "object", "properties": {}, "required": []},
    action="getting current task details",
)

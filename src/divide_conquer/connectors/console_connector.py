# src/divide_conquer/connectors/console_connector.py

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import ToolRegistry
from ..cli.commands import registry as tool_registry
from ..core.errors import UnknownToolError
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_console_line(state: AppState, line: str, registry: ToolRegistry = tool_registry) -> str | None:
    """
    Handle one line like `/add_note {"content": "..."}`.
    Returns the text to print, or None for blank input.
    """
    line = line.strip()
    if not line:
        return None

    if not line.startswith("/"):
        return "Tools are called as /<tool> {json arguments}. Use /help to list tools."

    name, _, raw_args = line[1:].partition(" ")
    name = name.strip().lower()

    if name in ("help", "h", "?"):
        return registry.build_help()

    arguments = {}
    raw_args = raw_args.strip()
    if raw_args:
        try:
            arguments = json.loads(raw_args)
        except json.JSONDecodeError as e:
            return f"Arguments are not valid JSON: {e}"

    try:
        result = registry.call(state, name, arguments)
    except UnknownToolError as e:
        return f"{e.message}. Use /help to list available tools."

    return f"[ERROR] {result.text}" if result.is_error else result.text


def run_console_loop(
    state: AppState,
    registry: ToolRegistry = tool_registry,
    read_line: Callable[[str], str] = input,
) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help to list tools. Use /exit to quit.\n")

    while True:
        try:
            user_input = read_line(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = handle_console_line(state, user_input, registry)
        except Exception:
            logger.exception("Console tool handler crashed.")
            response = "Internal error while handling a tool call."

        if response is not None:
            _print_ts(response)

    logger.info("Console connector finished.")

# src/divide_conquer/connectors/stdio_connector.py

"""
Stdio connector: newline-delimited JSON-RPC 2.0 on stdin/stdout.

Speaks the subset of the Model Context Protocol a tool server needs:
initialize, ping, tools/list and tools/call. Notifications (messages
without an id) are accepted and never answered. Logs go to stderr; stdout
carries protocol messages only.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, TextIO

from .. import __version__
from ..cli.commands import ToolRegistry
from ..cli.commands import registry as tool_registry
from ..core.errors import InvalidParamsError, UnknownToolError
from ..core.state import AppState

logger = logging.getLogger(__name__)

SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")
PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[-1]
SERVER_NAME = "divide-conquer-server"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class RpcError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _response(msg_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "result": result}


def _error(msg_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "error": {"code": code, "message": message}}


def _negotiate_version(requested: Any) -> str:
    """Echo the client's version when we speak it, otherwise offer our latest."""
    if requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    if requested is not None:
        logger.info("Client asked for protocol %r, offering %s", requested, PROTOCOL_VERSION)
    return PROTOCOL_VERSION


def _call_tool(state: AppState, registry: ToolRegistry, params: dict[str, Any]) -> dict[str, Any]:
    name = params.get("name")
    if not isinstance(name, str) or not name:
        raise RpcError(INVALID_PARAMS, "Tool name is required")

    try:
        result = registry.call(state, name, params.get("arguments"))
    except UnknownToolError as e:
        raise RpcError(METHOD_NOT_FOUND, e.message) from e

    if result.error_code == InvalidParamsError.code:
        raise RpcError(INVALID_PARAMS, result.text)

    out: dict[str, Any] = {"content": [{"type": "text", "text": result.text}]}
    if result.is_error:
        out["isError"] = True
    return out


def handle_message(
    state: AppState,
    message: Any,
    registry: ToolRegistry = tool_registry,
) -> dict[str, Any] | None:
    """Dispatch one decoded JSON-RPC message. Returns the response, or None for notifications."""
    if not isinstance(message, dict) or message.get("jsonrpc") != "2.0":
        return _error(None, INVALID_REQUEST, "Invalid Request")

    msg_id = message.get("id")
    method = message.get("method")
    params = message.get("params") or {}
    is_notification = "id" not in message

    try:
        if not isinstance(method, str):
            raise RpcError(INVALID_REQUEST, "Invalid Request")
        if not isinstance(params, dict):
            raise RpcError(INVALID_PARAMS, "params must be an object")

        if method == "initialize":
            result = {
                "protocolVersion": _negotiate_version(params.get("protocolVersion")),
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": __version__},
            }
        elif method == "ping":
            result = {}
        elif method == "tools/list":
            result = {"tools": registry.list_tools()}
        elif method == "tools/call":
            result = _call_tool(state, registry, params)
        elif method.startswith("notifications/"):
            return None
        else:
            raise RpcError(METHOD_NOT_FOUND, f"Method not found: {method}")
    except RpcError as e:
        if is_notification:
            logger.debug("Dropping error for notification %s: %s", method, e.message)
            return None
        return _error(msg_id, e.code, e.message)
    except Exception as e:
        logger.exception("Request %s crashed.", method)
        if is_notification:
            return None
        return _error(msg_id, INTERNAL_ERROR, f"Error: {e}")

    if is_notification:
        return None
    return _response(msg_id, result)


def run_stdio_server(
    state: AppState,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    registry: ToolRegistry = tool_registry,
) -> None:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    logger.info(
        "Divide and Conquer server running on stdio (store=%s)",
        getattr(state.store, "path", "memory"),
    )

    for line in stdin:
        line = line.strip()
        if not line:
            continue

        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Unparsable message: %s", e)
            reply: dict[str, Any] | None = _error(None, PARSE_ERROR, "Parse error")
        else:
            reply = handle_message(state, message, registry)

        if reply is not None:
            stdout.write(json.dumps(reply, ensure_ascii=False) + "\n")
            stdout.flush()

    logger.info("Stdio EOF received, exiting.")

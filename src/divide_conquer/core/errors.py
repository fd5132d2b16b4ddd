# src/divide_conquer/core/errors.py

"""
Error taxonomy shared by the engine and the tool registry.

- InvalidParamsError: bad or missing arguments, index out of range.
  The document is never touched when this is raised.
- InternalError: the store could not persist the document.

Load-side failures are not errors: the store degrades to the default document.
"""

from __future__ import annotations


class TaskError(Exception):
    code = "task_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidParamsError(TaskError):
    code = "invalid_params"


class InternalError(TaskError):
    code = "internal_error"


class UnknownToolError(TaskError):
    code = "unknown_tool"

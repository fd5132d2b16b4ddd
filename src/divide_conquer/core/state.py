# src/divide_conquer/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .ports import TaskDocumentRepo


@dataclass
class AppState:
    # Store Settings on the state for easy access in connectors.
    settings: object

    store: TaskDocumentRepo

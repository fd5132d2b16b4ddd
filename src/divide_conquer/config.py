# src/divide_conquer/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is created on disk at import time.
- All paths are overridable so tests and multiple checklists can coexist.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DNC"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_to_file: bool

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Local data paths ----
    data_dir: Path
    task_file_path: Path
    log_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "divide-conquer").strip() or "divide-conquer"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_to_file = _env_bool(_k("LOG_TO_FILE"), True)

        # stdio server by default: the checklist is normally driven by an agent.
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), False)

        data_dir = _env_path(_k("DATA_DIR"), Path.home() / ".mcp_config")
        task_file_path = _env_path(_k("TASK_FILE"), data_dir / "divide_and_conquer.json")
        log_dir = _env_path(_k("LOG_DIR"), data_dir / "logs")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_to_file=log_to_file,
            console_enabled=console_enabled,
            data_dir=data_dir,
            task_file_path=task_file_path,
            log_dir=log_dir,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS

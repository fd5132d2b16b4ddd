# src/divide_conquer/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs one connector in the main thread:
- stdio JSON-RPC server (default, for agents),
- console REPL (DNC_CONSOLE_ENABLED=1, for humans).
"""

from __future__ import annotations

import logging
import signal
import sys

from .. import __version__
from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..connectors.stdio_connector import run_stdio_server
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = settings.log_dir if settings.log_to_file else None
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s %s...", settings.app_name, __version__)

    state = create_initial_state(settings=settings)

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        sys.exit(0)

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        # Not in the main thread, or SIGTERM unsupported on this platform.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            run_stdio_server(state)
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()

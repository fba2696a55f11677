# src/taskbell/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, attaches the console connector and runs
the reminder evaluator on an asyncio loop until SIGINT/SIGTERM.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import attach_console
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.service.stop()
    except Exception:
        logger.exception("Failed to stop reminder service.")

    # ReminderStore uses short-lived sqlite connections per call; close() is a hook only.
    try:
        state.store.close()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)


async def run(state: AppState) -> None:
    """Run the evaluator until a stop signal arrives."""
    stop_main = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, _handle_signal, signum)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support add_signal_handler.
            signal.signal(signum, lambda s, _f: loop.call_soon_threadsafe(_handle_signal, s))

    detach = attach_console(state)
    state.service.start()
    try:
        await stop_main.wait()
    finally:
        await state.service.aclose()
        detach()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskbell")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "taskbell"))

    state = create_initial_state(settings=settings)

    try:
        asyncio.run(run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()

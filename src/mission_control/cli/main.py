# src/mission_control/cli/main.py

"""
CLI entrypoint.

Initializes logging, loads the workspace (remote, then offline cache, then empty),
starts autosave and runs the console surface. On exit the pending save is flushed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifier, console_confirm, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.bridge.aclose(final_flush=True)
    except Exception:
        logger.exception("Failed to flush workspace on shutdown.")


async def run(settings) -> None:
    state = await create_initial_state(
        settings=settings,
        notifier=ConsoleNotifier(),
        confirm=console_confirm,
    )
    state.bridge.start_autosave()

    loop = asyncio.get_running_loop()
    console = asyncio.create_task(run_console_loop(state))

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        console.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        # add_signal_handler is unavailable on some platforms (Windows).
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, _handle_signal, sig)

    try:
        with contextlib.suppress(asyncio.CancelledError):
            await console
    finally:
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "mission-control"))
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        pass
    logger.info("Bye.")


if __name__ == "__main__":
    main()

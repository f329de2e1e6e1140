# src/mission_control/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import shlex
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..cli.render import render_projection, render_stats
from ..core.state import AppState

logger = logging.getLogger(__name__)

PROMPT = ">>> "


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except OSError:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    """Toast-style status lines ("Saving...", "Saved", "Saved locally", ...)."""

    def __init__(self, *, quiet: bool = False) -> None:
        self.quiet = quiet

    def notify(self, message: str) -> None:
        logger.debug("notify: %s", message)
        if not self.quiet:
            _print_ts(f"[status] {message}")


async def console_confirm(message: str) -> bool:
    """Yes/no prompt for destructive actions, read off the event loop thread."""
    try:
        answer = (await asyncio.to_thread(input, f"{message} [y/N] ")).strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer in ("y", "yes")


def _draw(state: AppState) -> None:
    ctl = state.controller
    print(render_stats(ctl.stats()))
    print(render_projection(ctl.render()))


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (source=%s).", state.load_source.value)
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")
    _draw(state)

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations (e.g., export)
        _print_ts(text)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, PROMPT)).strip()
            _rewrite_prev_line(f"[{_ts_local()}] {PROMPT}{user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Bare text is a quick add, like Ctrl/Cmd+K.
            user_input = "/quick " + shlex.quote(user_input)

        try:
            cmd_response = await command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            _print_ts(cmd_response)

    logger.info("Console connector finished.")

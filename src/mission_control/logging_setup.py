# src/mission_control/logging_setup.py

from __future__ import annotations

import logging
import logging.handlers
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# The bridge logs every debounced write and autosave tick.
CONSOLE_QUIET_PREFIXES: tuple[str, ...] = ("mission_control.persistence.",)


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console filter:
    - mission_control logs pass, except quiet prefixes which need WARNING+
    - captured Python warnings ('py.warnings') and third-party logs need ERROR+
    """

    def __init__(self, quiet_prefixes: Iterable[str] = CONSOLE_QUIET_PREFIXES) -> None:
        super().__init__()
        self._quiet = tuple(quiet_prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == "mission_control" or name.startswith("mission_control."):
            if self._quiet and name.startswith(self._quiet):
                return record.levelno >= logging.WARNING
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/mission_control",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_file_name: str = "mission_control.log",
    quiet_prefixes: Iterable[str] = CONSOLE_QUIET_PREFIXES,
    max_bytes: int = 0,
    stream: TextIO | None = None,
) -> Path:
    """
    Configure root logging once, before the first log line:
    - stderr handler, filtered for interactive use
    - file handler with everything (rotating when max_bytes > 0)

    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / log_file_name

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Re-running replaces the handlers instead of stacking them.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    ch = logging.StreamHandler(stream or sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter(quiet_prefixes))
    root.addHandler(ch)

    fh: logging.Handler
    if max_bytes > 0:
        fh = logging.handlers.RotatingFileHandler(
            str(log_file), maxBytes=max_bytes, backupCount=3, encoding="utf-8"
        )
    else:
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)

    # httpx logs one INFO line per request; autosave would flood the file.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return log_file

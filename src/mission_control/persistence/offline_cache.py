# src/mission_control/persistence/offline_cache.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from ..core.ports import WorkspaceDocument

logger = logging.getLogger(__name__)


class JsonFileCache:
    """
    Offline cache: one JSON file holding the last-known full document.

    Writes are atomic (tmp file + os.replace). A missing or corrupt file reads as None.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> WorkspaceDocument | None:
        if not self._path.exists():
            return None
        try:
            data: Any = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.exception("Offline cache unreadable at %s", self._path)
            return None
        if not isinstance(data, dict):
            logger.warning("Offline cache at %s is not a JSON object; ignoring", self._path)
            return None
        return data

    def write(self, document: WorkspaceDocument) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(document, ensure_ascii=False), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            # Best-effort: task notes can be personal, keep the file private on disk.
            os.chmod(self._path, 0o600)

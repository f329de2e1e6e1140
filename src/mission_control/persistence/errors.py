# src/mission_control/persistence/errors.py

from __future__ import annotations


class RemoteStoreError(RuntimeError):
    """Remote store unreachable, answered non-2xx, or returned something unusable."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

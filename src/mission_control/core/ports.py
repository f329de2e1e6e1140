# src/mission_control/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The controller and the persistence bridge depend on Protocols instead of concrete
implementations, so the HTTP client, the on-disk cache and the user-facing surface
stay swappable (and fakeable in tests).
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

WorkspaceDocument = dict[str, Any]
# The full persisted JSON document: {"meta", "settings", "projects", "assignees", "tasks"}.

# Awaited by the controller, so a surface can prompt without blocking the event loop.
ConfirmFn = Callable[[str], Awaitable[bool]]


@dataclass(slots=True, frozen=True)
class PushResult:
    success: bool
    last_sync: str | None


@dataclass(slots=True, frozen=True)
class ExportedDocument:
    filename: str
    content: bytes


class RemoteStore(Protocol):
    """
    Remote side of the persistence bridge.

    Implementations raise RemoteStoreError for every failure (transport, non-2xx,
    unparseable body); the bridge catches nothing else.
    """

    def fetch_document(self) -> Awaitable[WorkspaceDocument]: ...

    def push_document(self, document: WorkspaceDocument) -> Awaitable[PushResult]: ...

    def export_document(self) -> Awaitable[ExportedDocument]: ...

    def aclose(self) -> Awaitable[None]: ...


class OfflineCache(Protocol):
    """Local key-value slot holding the last-known full document."""

    def read(self) -> WorkspaceDocument | None: ...

    def write(self, document: WorkspaceDocument) -> None: ...


class Notifier(Protocol):
    """User-facing transient notices (the dashboard's toasts)."""

    def notify(self, message: str) -> None: ...

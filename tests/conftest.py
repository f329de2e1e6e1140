# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from mission_control.core.controller import InteractionController
from mission_control.core.state import AppState
from mission_control.persistence.bridge import PersistenceBridge
from mission_control.tasks.task_store import TaskStore

from .fakes import FakeOfflineCache, FakeRemoteStore, RecordingNotifier, ScriptedConfirm

# Fixed "now" for every deterministic test: 2025-06-01 12:00 UTC.
NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap helpers.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="mission-control-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        offline_cache_path=tmp_path / "data" / "offline_cache.json",
        export_dir=tmp_path / "exports",
        api_base_url="http://testserver/api",
        request_timeout_seconds=None,
        save_debounce_seconds=0.01,
        autosave_interval_seconds=60.0,
    )


@pytest.fixture()
def sample_document() -> dict[str, Any]:
    """
    Four tasks around NOW:
    - task-1 due today (todo), task-2 overdue (doing),
    - task-3 done today, task-4 in backlog without a deadline.
    """
    return {
        "meta": {"lastSync": "2025-05-31T18:00:00.000Z", "version": 1},
        "settings": {"theme": "dark", "defaultView": "kanban", "defaultCalendarView": "month"},
        "projects": ["Launch", "Ops"],
        "assignees": ["Dana Scully", "Fox Mulder"],
        "tasks": [
            {
                "id": "task-1",
                "title": "Design review",
                "project": "Launch",
                "status": "todo",
                "priority": "p1",
                "assignee": "Dana Scully",
                "deadline": "2025-06-01",
                "effort": "medium",
                "progress": 30,
                "nextAction": "Book a room",
                "tags": ["design"],
                "notes": "check the mockups",
                "createdAt": "2025-05-20T09:00:00.000Z",
                "updatedAt": "2025-05-20T09:00:00.000Z",
            },
            {
                "id": "task-2",
                "title": "Fix login",
                "project": "Ops",
                "status": "doing",
                "priority": "p0",
                "assignee": "Fox Mulder",
                "deadline": "2025-05-30",
                "effort": "large",
                "progress": 50,
                "nextAction": "",
                "tags": [],
                "notes": "",
                "createdAt": "2025-05-21T09:00:00.000Z",
                "updatedAt": "2025-05-29T09:00:00.000Z",
            },
            {
                "id": "task-3",
                "title": "Release notes",
                "project": "Launch",
                "status": "done",
                "priority": "p2",
                "assignee": "Fox Mulder",
                "deadline": "2025-06-10",
                "effort": "small",
                "progress": 100,
                "nextAction": "",
                "tags": [],
                "notes": "",
                "createdAt": "2025-05-22T09:00:00.000Z",
                "updatedAt": "2025-06-01T09:00:00.000Z",
            },
            {
                "id": "task-4",
                "title": "Backlog grooming",
                "project": "Ops",
                "status": "backlog",
                "priority": "p3",
                "assignee": "Dana Scully",
                "deadline": None,
                "effort": "medium",
                "progress": 0,
                "nextAction": "",
                "tags": [],
                "notes": "",
                "createdAt": "2025-05-23T09:00:00.000Z",
                "updatedAt": "2025-05-23T09:00:00.000Z",
            },
        ],
    }


@pytest.fixture()
def store(sample_document: dict[str, Any]) -> TaskStore:
    return TaskStore.from_document(sample_document, clock=fixed_clock)


@pytest.fixture()
def remote(sample_document: dict[str, Any]) -> FakeRemoteStore:
    return FakeRemoteStore(sample_document)


@pytest.fixture()
def cache() -> FakeOfflineCache:
    return FakeOfflineCache()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def confirm() -> ScriptedConfirm:
    return ScriptedConfirm(True)


@pytest.fixture()
def bridge(remote: FakeRemoteStore, cache: FakeOfflineCache, notifier: RecordingNotifier) -> PersistenceBridge:
    return PersistenceBridge(
        remote,
        cache,
        notifier=notifier,
        debounce_seconds=0.01,
        autosave_interval_seconds=60.0,
        clock=fixed_clock,
    )


@pytest.fixture()
def controller(
    store: TaskStore,
    bridge: PersistenceBridge,
    notifier: RecordingNotifier,
    confirm: ScriptedConfirm,
) -> InteractionController:
    return InteractionController(
        store,
        bridge,
        notifier=notifier,
        confirm=confirm,
        clock=fixed_clock,
    )


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    store: TaskStore,
    bridge: PersistenceBridge,
    controller: InteractionController,
) -> AppState:
    """AppState wired with the in-memory fakes above."""
    return AppState(settings=settings, store=store, bridge=bridge, controller=controller)

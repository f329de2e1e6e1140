# src/mission_control/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..persistence.bridge import LoadSource, PersistenceBridge
from ..tasks.task_store import TaskStore
from .controller import InteractionController


@dataclass
class AppState:
    # Settings object (config.Settings or a test SimpleNamespace).
    settings: Any

    store: TaskStore
    bridge: PersistenceBridge
    controller: InteractionController
    load_source: LoadSource = LoadSource.REMOTE

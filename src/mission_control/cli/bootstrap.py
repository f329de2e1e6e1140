# src/mission_control/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the remote store, offline cache and persistence bridge,
- loads the workspace (the startup gate) and builds the controller.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.controller import InteractionController
from ..core.ports import ConfirmFn, Notifier, OfflineCache, RemoteStore
from ..core.state import AppState
from ..persistence.bridge import PersistenceBridge
from ..persistence.offline_cache import JsonFileCache
from ..persistence.remote import HttpRemoteStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.offline_cache_path.parent.mkdir(parents=True, exist_ok=True)


def build_bridge(
    settings,
    *,
    notifier: Notifier | None = None,
    remote: RemoteStore | None = None,
    cache: OfflineCache | None = None,
) -> PersistenceBridge:
    if remote is None:
        remote = HttpRemoteStore(
            settings.api_base_url,
            timeout_seconds=getattr(settings, "request_timeout_seconds", None),
        )
    if cache is None:
        cache = JsonFileCache(settings.offline_cache_path)
    return PersistenceBridge(
        remote,
        cache,
        notifier=notifier,
        debounce_seconds=settings.save_debounce_seconds,
        autosave_interval_seconds=settings.autosave_interval_seconds,
    )


async def create_initial_state(
    *,
    settings=None,
    notifier: Notifier | None = None,
    confirm: ConfirmFn | None = None,
    remote: RemoteStore | None = None,
    cache: OfflineCache | None = None,
) -> AppState:
    """
    Load the workspace and wire AppState.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    bridge = build_bridge(settings, notifier=notifier, remote=remote, cache=cache)
    result = await bridge.load()
    if result.failed:
        logger.warning("Starting with an empty workspace: %s", result.error)

    controller = InteractionController(
        result.store,
        bridge,
        notifier=notifier,
        confirm=confirm,
    )
    controller.apply_settings()

    return AppState(
        settings=settings,
        store=result.store,
        bridge=bridge,
        controller=controller,
        load_source=result.source,
    )

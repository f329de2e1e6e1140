# src/mission_control/persistence/bridge.py

from __future__ import annotations

"""
Persistence bridge.

Bridges the in-memory TaskStore to two places:
- the offline cache, written synchronously on every save (survives a crash/reload),
- the remote store, written asynchronously:
    * debounced: saves within the debounce window collapse into one write
      (the timer is reset by each call),
    * immediate: bypasses (and cancels) the pending timer,
    * autosave: a background loop forces an immediate write every interval.

Every remote write sends the full store snapshot taken when the write starts, so
out-of-order completions are harmless (last write wins). Failures are not retried;
the next debounce/autosave cycle resends the current state.

All scheduling happens on the running asyncio loop; save() must be called from it.
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from enum import StrEnum

from ..core.ports import ExportedDocument, Notifier, OfflineCache, RemoteStore
from ..tasks.task_models import DocumentError
from ..tasks.task_store import Clock, TaskStore
from .errors import RemoteStoreError

logger = logging.getLogger(__name__)


class LoadSource(StrEnum):
    REMOTE = "remote"
    OFFLINE = "offline"
    EMPTY = "empty"


@dataclass(slots=True, frozen=True)
class LoadResult:
    store: TaskStore
    source: LoadSource
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.source is LoadSource.EMPTY


@dataclass(slots=True, frozen=True)
class SaveOutcome:
    synced: bool
    last_sync: str | None = None
    error: str | None = None


class PersistenceBridge:
    def __init__(
        self,
        remote: RemoteStore,
        cache: OfflineCache,
        *,
        notifier: Notifier | None = None,
        debounce_seconds: float = 1.0,
        autosave_interval_seconds: float = 30.0,
        clock: Clock | None = None,
    ) -> None:
        self._remote = remote
        self._cache = cache
        self._notifier = notifier
        self._debounce_s = max(0.0, float(debounce_seconds))
        self._autosave_s = max(0.01, float(autosave_interval_seconds))
        self._clock = clock

        self._store: TaskStore | None = None
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._inflight: set[asyncio.Task[SaveOutcome]] = set()
        self._autosave_task: asyncio.Task[None] | None = None

    # ---- helpers ----

    def _notify(self, message: str) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify(message)
        except Exception:
            logger.debug("Notifier failed for message=%r", message, exc_info=True)

    def _write_cache(self, store: TaskStore) -> None:
        try:
            self._cache.write(store.to_document())
        except (OSError, TypeError, ValueError):
            logger.exception("Offline cache write failed")

    @property
    def has_pending_write(self) -> bool:
        return self._debounce_handle is not None

    @property
    def store(self) -> TaskStore | None:
        return self._store

    # ---- load ----

    async def load(self) -> LoadResult:
        """
        Remote first, then the offline cache, then an empty store.

        Never raises: the returned LoadResult says where the data came from.
        """
        try:
            doc = await self._remote.fetch_document()
            store = TaskStore.from_document(doc, clock=self._clock)
        except (RemoteStoreError, DocumentError) as e:
            logger.warning("Remote load failed: %s", e)
            remote_error = str(e)
        else:
            self._store = store
            logger.info("Data loaded from remote store tasks=%d", len(store))
            return LoadResult(store=store, source=LoadSource.REMOTE)

        cached = self._cache.read()
        if cached is not None:
            try:
                store = TaskStore.from_document(cached, clock=self._clock)
            except DocumentError:
                logger.exception("Offline cache document rejected")
            else:
                self._store = store
                logger.info("Using offline data tasks=%d", len(store))
                self._notify("Using offline data")
                return LoadResult(store=store, source=LoadSource.OFFLINE, error=remote_error)

        # Left unadopted so autosave and flush skip it until a user edit calls save().
        store = TaskStore.empty(clock=self._clock)
        logger.error("No remote or offline data available; starting empty")
        self._notify("Failed to load data")
        return LoadResult(store=store, source=LoadSource.EMPTY, error=remote_error)

    # ---- save ----

    def save(self, store: TaskStore, *, immediate: bool = False) -> asyncio.Task[SaveOutcome] | None:
        """
        Write the offline cache now and schedule the remote write.

        Returns the remote write task when immediate=True, None when debounced.
        """
        self._store = store
        self._cancel_debounce()
        self._write_cache(store)

        if immediate:
            return self._start_remote_write()

        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(self._debounce_s, self._on_debounce_elapsed)
        return None

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _on_debounce_elapsed(self) -> None:
        self._debounce_handle = None
        self._start_remote_write()

    def _start_remote_write(self) -> asyncio.Task[SaveOutcome]:
        task = asyncio.ensure_future(self._write_remote())
        self._inflight.add(task)
        task.add_done_callback(self._on_write_done)
        return task

    def _on_write_done(self, task: asyncio.Task[SaveOutcome]) -> None:
        self._inflight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Remote write crashed", exc_info=exc)

    async def _write_remote(self) -> SaveOutcome:
        store = self._store
        if store is None:
            return SaveOutcome(synced=False, error="nothing to save")

        snapshot = store.to_document()
        self._notify("Saving...")
        try:
            result = await self._remote.push_document(snapshot)
        except RemoteStoreError as e:
            logger.warning("Remote save failed, data kept locally: %s", e)
            self._notify("Saved locally")
            return SaveOutcome(synced=False, error=str(e))
        if not result.success:
            logger.warning("Remote store rejected the save, data kept locally")
            self._notify("Saved locally")
            return SaveOutcome(synced=False, error="remote store reported success=false")

        store.mark_synced(result.last_sync)
        self._write_cache(store)
        logger.debug("Remote save ok lastSync=%s tasks=%d", result.last_sync, len(store))
        self._notify("Saved")
        return SaveOutcome(synced=True, last_sync=result.last_sync)

    async def flush(self) -> SaveOutcome | None:
        """Immediate write of the latest store (if any), awaited."""
        if self._store is None:
            self._cancel_debounce()
            return None
        task = self.save(self._store, immediate=True)
        if task is None:
            return None
        return await task

    async def wait_idle(self) -> None:
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # ---- autosave ----

    def start_autosave(self) -> None:
        if self._autosave_task is not None and not self._autosave_task.done():
            return
        self._autosave_task = asyncio.create_task(self._autosave_loop())
        logger.info("Autosave started interval=%.1fs", self._autosave_s)

    async def stop_autosave(self) -> None:
        task = self._autosave_task
        self._autosave_task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _autosave_loop(self) -> None:
        """
        Force an immediate write every interval, regardless of debounce state.

        To stop the loop, cancel the task (stop_autosave()).
        """
        while True:
            await asyncio.sleep(self._autosave_s)
            store = self._store
            if store is None:
                continue
            try:
                task = self.save(store, immediate=True)
                if task is not None:
                    await task
            except Exception:
                logger.exception("Autosave failed")

    # ---- export / shutdown ----

    async def export(self) -> ExportedDocument:
        return await self._remote.export_document()

    async def aclose(self, *, final_flush: bool = True) -> None:
        await self.stop_autosave()
        if final_flush:
            await self.flush()
        else:
            self._cancel_debounce()
        await self.wait_idle()
        await self._remote.aclose()
        logger.info("Persistence bridge closed.")

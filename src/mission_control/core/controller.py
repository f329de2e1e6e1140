# src/mission_control/core/controller.py

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from ..persistence.bridge import PersistenceBridge
from ..persistence.errors import RemoteStoreError
from ..tasks.filtering import ALL, FilterSelection, VisibleSet
from ..tasks.task_models import (
    CalendarView,
    DashboardStats,
    Task,
    TaskStatus,
    Theme,
    ViewName,
)
from ..tasks.task_store import TaskStore
from ..views.calendar import (
    CalendarMonth,
    CalendarPlaceholder,
    project_calendar,
    shift_reference,
)
from ..views.kanban import KanbanBoard, drop_target_status, project_kanban
from ..views.list_view import ListTable, project_list_table
from .ports import ConfirmFn, ExportedDocument, Notifier

logger = logging.getLogger(__name__)

Projection = KanbanBoard | ListTable | CalendarMonth | CalendarPlaceholder

DEFAULT_PROJECT = "General"
DEFAULT_ASSIGNEE = "Unassigned"


def _local_now() -> datetime:
    return datetime.now().astimezone()


async def _refuse(_message: str) -> bool:
    return False


class Overlay(StrEnum):
    NEW_TASK = "new_task"
    SETTINGS = "settings"
    SHORTCUTS = "shortcuts"
    QUICK_ADD = "quick_add"
    DETAIL = "detail"


class KeyAction(StrEnum):
    NONE = "none"
    NEW_TASK = "new_task"
    FOCUS_SEARCH = "focus_search"
    CLOSE_OVERLAYS = "close_overlays"
    SHOW_SHORTCUTS = "show_shortcuts"
    QUICK_ADD = "quick_add"


@dataclass(slots=True, frozen=True)
class DragPayload:
    task_id: str


class InteractionController:
    """
    Translates user gestures into TaskStore commands.

    After every mutation:
    - the persistence bridge is asked to save (fire-and-forget),
    - the visible set is recomputed,
    - the active view is marked for re-render.

    The controller knows nothing about a rendering technology; render() returns the
    projection of the active view and the surface decides how to draw it.
    """

    def __init__(
        self,
        store: TaskStore,
        bridge: PersistenceBridge,
        *,
        notifier: Notifier | None = None,
        confirm: ConfirmFn | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.bridge = bridge
        self._notifier = notifier
        # No confirmation callback means destructive actions are refused.
        self._confirm: ConfirmFn = confirm or _refuse
        self._clock = clock or _local_now

        self.visible = VisibleSet()
        self.current_view: ViewName = ViewName.KANBAN
        self.calendar_view: CalendarView = CalendarView.MONTH
        self.calendar_reference: date = self.today()

        self.overlays: set[Overlay] = set()
        self.detail_task_id: str | None = None
        self.search_focused = False
        self.needs_render = True
        self._drag: DragPayload | None = None

        self.visible.recompute(store)

    # ---- plumbing ----

    def today(self) -> date:
        return self._clock().date()

    def _notify(self, message: str) -> None:
        if self._notifier is not None:
            self._notifier.notify(message)

    def _after_mutation(self, *, immediate: bool = False) -> None:
        self.bridge.save(self.store, immediate=immediate)
        self.visible.recompute(self.store)
        self.needs_render = True

    def apply_settings(self) -> None:
        """Adopt the persisted default views (called once after load)."""
        self.current_view = self.store.settings.default_view
        self.calendar_view = self.store.settings.default_calendar_view
        self.needs_render = True

    # ---- rendering ----

    @property
    def visible_tasks(self) -> list[Task]:
        return self.visible.tasks

    def render(self) -> Projection:
        visible = self.visible.tasks
        today = self.today()
        self.needs_render = False
        if self.current_view is ViewName.KANBAN:
            return project_kanban(visible, today)
        if self.current_view is ViewName.LIST:
            return project_list_table(visible, today)
        return project_calendar(self.calendar_view, visible, self.calendar_reference, today)

    def stats(self) -> DashboardStats:
        return self.store.stats(today=self.today())

    def switch_view(self, view: ViewName | str) -> ViewName:
        self.current_view = ViewName(view)
        self.needs_render = True
        return self.current_view

    def switch_calendar_view(self, view: CalendarView | str) -> CalendarView:
        self.calendar_view = CalendarView(view)
        self.needs_render = True
        return self.calendar_view

    def navigate_calendar(self, direction: int) -> date:
        self.calendar_reference = shift_reference(self.calendar_reference, self.calendar_view, direction)
        self.needs_render = True
        return self.calendar_reference

    def go_to_today(self) -> date:
        self.calendar_reference = self.today()
        self.needs_render = True
        return self.calendar_reference

    # ---- filter / search ----

    def set_filters(
        self,
        *,
        assignee: str = ALL,
        project: str = ALL,
        priority: str = ALL,
    ) -> list[Task]:
        selection = FilterSelection(assignee=assignee, project=project, priority=priority)
        self.needs_render = True
        return self.visible.set_filters(self.store, selection)

    def search(self, query: str) -> list[Task]:
        self.needs_render = True
        return self.visible.set_query(self.store, query)

    # ---- drag & drop ----

    def drag_start(self, task_id: str) -> DragPayload | None:
        if self.store.get_task(task_id) is None:
            return None
        self._drag = DragPayload(task_id=task_id)
        return self._drag

    def drag_end(self) -> None:
        self._drag = None

    def drop(self, column_status: TaskStatus | str, payload: DragPayload | None = None) -> Task | None:
        """
        Drop the dragged card on a column.

        Moving into another column transitions the status (done forces progress 100)
        and saves; dropping on the same column or without a payload changes nothing.
        """
        payload = payload or self._drag
        self._drag = None
        if payload is None:
            return None
        task = self.store.get_task(payload.task_id)
        if task is None:
            return None
        target = drop_target_status(task, column_status)
        if target is None:
            return None
        return self.move_task(task.id, target)

    def move_task(self, task_id: str, status: TaskStatus | str) -> Task | None:
        task = self.store.set_status(task_id, status)
        if task is None:
            return None
        logger.info("Task %s -> %s", task_id, task.status.value)
        self._after_mutation()
        return task

    # ---- task commands ----

    def open_new_task(self) -> None:
        self.overlays.add(Overlay.NEW_TASK)

    def create_task(self, form: Mapping[str, Any]) -> Task:
        """
        Create a task from submitted form values (document-style keys accepted).

        Closes the new-task overlay on success.
        """
        task = self.store.add_task(
            title=str(form.get("title") or ""),
            project=str(form.get("project") or ""),
            assignee=str(form.get("assignee") or ""),
            status=form.get("status") or TaskStatus.TODO,
            priority=form.get("priority") or "p1",
            deadline=form.get("deadline") or None,
            effort=str(form.get("effort") or "medium"),
            next_action=str(form.get("nextAction") or form.get("next_action") or ""),
            notes=str(form.get("notes") or ""),
        )
        self.overlays.discard(Overlay.NEW_TASK)
        self._after_mutation()
        self._notify("Task created")
        return task

    def quick_add(self, title: str) -> Task | None:
        self.overlays.discard(Overlay.QUICK_ADD)
        if not title or not title.strip():
            return None
        task = self.store.add_task(
            title=title,
            project=self.store.projects[0] if self.store.projects else DEFAULT_PROJECT,
            assignee=self.store.assignees[0] if self.store.assignees else DEFAULT_ASSIGNEE,
            status=TaskStatus.TODO,
            priority="p1",
        )
        self._after_mutation()
        self._notify("Task created")
        return task

    def open_detail(self, task_id: str) -> Task | None:
        task = self.store.get_task(task_id)
        if task is None:
            return None
        self.detail_task_id = task_id
        self.overlays.add(Overlay.DETAIL)
        return task

    def close_detail(self) -> None:
        self.detail_task_id = None
        self.overlays.discard(Overlay.DETAIL)

    def edit_field(self, field: str, value: Any) -> Task | None:
        """Inline edit in the detail editor: applies to the task currently open."""
        if self.detail_task_id is None:
            return None
        return self.edit_task_field(self.detail_task_id, field, value)

    def edit_task_field(self, task_id: str, field: str, value: Any) -> Task | None:
        task = self.store.update_task(task_id, field, value)
        if task is None:
            return None
        self._after_mutation()
        return task

    def complete_task(self, task_id: str) -> Task | None:
        task = self.store.complete_task(task_id)
        if task is None:
            return None
        self._after_mutation()
        self._notify("Task completed")
        return task

    async def delete_task(self, task_id: str) -> bool:
        if self.store.get_task(task_id) is None:
            return False
        if not await self._confirm("Delete this task?"):
            logger.debug("Delete cancelled id=%s", task_id)
            return False
        removed = self.store.remove_task(task_id)
        if self.detail_task_id == task_id:
            self.close_detail()
        self._after_mutation()
        self._notify("Task deleted")
        return removed

    def duplicate_task(self, task_id: str) -> Task | None:
        copy = self.store.duplicate_task(task_id)
        if copy is None:
            return None
        self.close_detail()
        self._after_mutation()
        self._notify("Task duplicated")
        return copy

    # ---- settings ----

    def open_settings(self) -> None:
        self.overlays.add(Overlay.SETTINGS)

    def add_project(self, name: str) -> bool:
        if not self.store.add_project(name):
            return False
        self._after_mutation(immediate=True)
        return True

    def remove_project(self, name: str) -> bool:
        if not self.store.remove_project(name):
            return False
        self._after_mutation(immediate=True)
        return True

    def add_assignee(self, name: str) -> bool:
        if not self.store.add_assignee(name):
            return False
        self._after_mutation(immediate=True)
        return True

    def remove_assignee(self, name: str) -> bool:
        if not self.store.remove_assignee(name):
            return False
        self._after_mutation(immediate=True)
        return True

    def toggle_theme(self) -> Theme:
        theme = self.store.toggle_theme()
        self._after_mutation(immediate=True)
        return theme

    def set_theme(self, theme: Theme | str) -> Theme:
        value = self.store.set_theme(theme)
        self._after_mutation(immediate=True)
        return value

    def set_default_view(self, view: ViewName | str) -> ViewName:
        value = self.store.set_default_view(view)
        self._after_mutation(immediate=True)
        return value

    def set_default_calendar_view(self, view: CalendarView | str) -> CalendarView:
        value = self.store.set_default_calendar_view(view)
        self._after_mutation(immediate=True)
        return value

    # ---- keyboard ----

    def handle_key(
        self,
        key: str,
        *,
        ctrl: bool = False,
        meta: bool = False,
        in_text_input: bool = False,
    ) -> KeyAction:
        """
        n: new task, /: focus search, Escape: close overlays, ?: shortcut help,
        Ctrl/Cmd+K: quick add. Plain keys are ignored while typing in an input.
        """
        if (ctrl or meta) and key.lower() == "k":
            self.overlays.add(Overlay.QUICK_ADD)
            return KeyAction.QUICK_ADD

        if in_text_input:
            return KeyAction.NONE

        if key in ("n", "N"):
            self.open_new_task()
            return KeyAction.NEW_TASK
        if key == "/":
            self.search_focused = True
            return KeyAction.FOCUS_SEARCH
        if key == "Escape":
            self.close_overlays()
            return KeyAction.CLOSE_OVERLAYS
        if key == "?":
            self.overlays.add(Overlay.SHORTCUTS)
            return KeyAction.SHOW_SHORTCUTS
        return KeyAction.NONE

    def close_overlays(self) -> None:
        self.overlays.clear()
        self.detail_task_id = None
        self.search_focused = False

    # ---- export ----

    async def export(self) -> ExportedDocument | None:
        try:
            exported = await self.bridge.export()
        except RemoteStoreError as e:
            logger.warning("Export failed: %s", e)
            self._notify("Export failed")
            return None
        self._notify(f"Exported {exported.filename}")
        return exported

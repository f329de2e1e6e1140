# src/mission_control/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, date, datetime
from typing import Any

from .task_models import (
    CalendarView,
    DashboardStats,
    DocumentError,
    Priority,
    Task,
    TaskStatus,
    Theme,
    ViewName,
    WorkspaceSettings,
    clamp_progress,
    parse_deadline,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Field names accepted by update_task, in document (camelCase) and attribute form.
_EDITABLE_FIELDS: dict[str, str] = {
    "title": "title",
    "project": "project",
    "assignee": "assignee",
    "status": "status",
    "priority": "priority",
    "deadline": "deadline",
    "progress": "progress",
    "effort": "effort",
    "nextAction": "next_action",
    "next_action": "next_action",
    "notes": "notes",
    "tags": "tags",
}
_READ_ONLY_FIELDS = {"id", "createdAt", "created_at", "updatedAt", "updated_at"}


def _utc_clock() -> datetime:
    return datetime.now(UTC)


def _unique_names(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    out: list[str] = []
    for item in raw:
        name = str(item).strip() if item is not None else ""
        if name and name not in out:
            out.append(name)
    return out


class TaskStore:
    """
    In-memory task collection: the single source of truth for a session.

    The mutation methods below are the only write surface. Every mutation is a single
    in-place update, visible to the next read; nothing is persisted from here
    (the persistence bridge snapshots the store via to_document()).

    Missing task ids are a no-op: mutations return None/False instead of raising.
    """

    def __init__(
        self,
        *,
        tasks: Iterable[Task] = (),
        projects: Iterable[str] = (),
        assignees: Iterable[str] = (),
        settings: WorkspaceSettings | None = None,
        last_sync: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._clock: Clock = clock or _utc_clock
        self._tasks: list[Task] = []
        self._index: dict[str, Task] = {}
        for task in tasks:
            if task.id in self._index:
                logger.warning("Duplicate task id dropped id=%s", task.id)
                continue
            self._tasks.append(task)
            self._index[task.id] = task
        self.projects: list[str] = _unique_names(list(projects))
        self.assignees: list[str] = _unique_names(list(assignees))
        self.settings: WorkspaceSettings = settings or WorkspaceSettings()
        self.last_sync: str | None = last_sync
        self._meta_extra: dict[str, Any] = {}
        self._doc_extra: dict[str, Any] = {}

    # ---- construction / serialization ----

    @classmethod
    def empty(cls, *, clock: Clock | None = None) -> TaskStore:
        return cls(clock=clock)

    @classmethod
    def from_document(cls, doc: Any, *, clock: Clock | None = None) -> TaskStore:
        """
        Build a store from the persisted JSON document.

        Tolerant by design of the file format: bad task entries are skipped, enum values
        fall back to defaults, unknown keys are preserved for write-back.
        """
        if not isinstance(doc, dict):
            raise DocumentError("workspace document must be a JSON object")

        tasks: list[Task] = []
        raw_tasks = doc.get("tasks")
        for raw in raw_tasks if isinstance(raw_tasks, list) else []:
            if not isinstance(raw, dict) or not raw.get("id") or raw.get("title") is None:
                logger.warning("Skipping malformed task entry: %r", raw)
                continue
            tasks.append(Task.from_document(raw))

        meta = doc.get("meta") if isinstance(doc.get("meta"), dict) else {}
        last_sync = meta.get("lastSync")

        store = cls(
            tasks=tasks,
            projects=_unique_names(doc.get("projects")),
            assignees=_unique_names(doc.get("assignees")),
            settings=WorkspaceSettings.from_document(doc.get("settings")),
            last_sync=str(last_sync) if last_sync else None,
            clock=clock,
        )
        store._meta_extra = {k: v for k, v in meta.items() if k != "lastSync"}
        store._doc_extra = {
            k: v
            for k, v in doc.items()
            if k not in {"meta", "settings", "projects", "assignees", "tasks"}
        }
        return store

    def to_document(self) -> dict[str, Any]:
        meta: dict[str, Any] = dict(self._meta_extra)
        meta["lastSync"] = self.last_sync
        doc: dict[str, Any] = dict(self._doc_extra)
        doc.update(
            {
                "meta": meta,
                "settings": self.settings.to_document(),
                "projects": list(self.projects),
                "assignees": list(self.assignees),
                "tasks": [t.to_document() for t in self._tasks],
            }
        )
        return doc

    # ---- reads ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Tasks in insertion order."""
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get_task(self, task_id: str) -> Task | None:
        return self._index.get(task_id)

    def stats(self, *, today: date, now: datetime | None = None) -> DashboardStats:
        """
        Header statistics.

        today: local calendar date used for overdue checks.
        now:   used for "done today", compared on the UTC date of updatedAt.
        """
        utc_today = (now or self._clock()).astimezone(UTC).date().isoformat()

        active = 0
        overdue = 0
        done_today = 0
        total_progress = 0
        for t in self._tasks:
            is_done = t.status is TaskStatus.DONE
            if not is_done:
                active += 1
                if t.deadline is not None and t.deadline < today:
                    overdue += 1
            elif t.updated_at.startswith(utc_today):
                done_today += 1
            total_progress += 100 if is_done else t.progress

        progress_pct = round(total_progress / len(self._tasks)) if self._tasks else 0
        return DashboardStats(
            active=active,
            overdue=overdue,
            done_today=done_today,
            progress_pct=progress_pct,
        )

    # ---- task mutations ----

    def _now_iso(self) -> str:
        return utc_now_iso(self._clock())

    def _new_id(self) -> str:
        ms = int(self._clock().timestamp() * 1000)
        while f"task-{ms}" in self._index:
            ms += 1
        return f"task-{ms}"

    def add_task(
        self,
        *,
        title: str,
        project: str = "",
        assignee: str = "",
        status: TaskStatus | str = TaskStatus.TODO,
        priority: Priority | str = Priority.P1,
        deadline: date | str | None = None,
        effort: str = "medium",
        next_action: str = "",
        notes: str = "",
        tags: Iterable[str] = (),
    ) -> Task:
        if not title or not str(title).strip():
            raise ValueError("title is required")

        st = TaskStatus(status)
        now = self._now_iso()
        task = Task(
            id=self._new_id(),
            title=str(title).strip(),
            project=project or "",
            assignee=assignee or "",
            status=st,
            priority=Priority(priority),
            deadline=parse_deadline(deadline),
            progress=100 if st is TaskStatus.DONE else 0,
            effort=effort or "medium",
            next_action=next_action or "",
            notes=notes or "",
            tags=list(tags),
            created_at=now,
            updated_at=now,
        )
        self._tasks.append(task)
        self._index[task.id] = task
        logger.debug("Task added id=%s status=%s project=%s", task.id, task.status.value, task.project)
        return task

    def update_task(self, task_id: str, field: str, value: Any) -> Task | None:
        """
        Set a single field, re-stamp updatedAt, and keep done => progress 100.

        Returns None when the task does not exist.
        """
        if field in _READ_ONLY_FIELDS:
            raise ValueError(f"field is not editable: {field}")
        attr = _EDITABLE_FIELDS.get(field)
        if attr is None:
            raise ValueError(f"unknown task field: {field}")

        task = self._index.get(task_id)
        if task is None:
            logger.debug("update_task: no task id=%s", task_id)
            return None

        coerced = self._coerce(attr, value)
        setattr(task, attr, coerced)
        if task.status is TaskStatus.DONE and attr in {"status", "progress"}:
            task.progress = 100
        task.updated_at = self._now_iso()
        logger.debug("Task updated id=%s field=%s", task_id, attr)
        return task

    @staticmethod
    def _coerce(attr: str, value: Any) -> Any:
        if attr == "title":
            title = str(value or "").strip()
            if not title:
                raise ValueError("title is required")
            return title
        if attr == "status":
            return TaskStatus(str(value))
        if attr == "priority":
            return Priority(str(value))
        if attr == "deadline":
            return parse_deadline(value)
        if attr == "progress":
            return clamp_progress(value)
        if attr == "tags":
            if isinstance(value, str):
                return [t.strip() for t in value.split(",") if t.strip()]
            return [str(t) for t in (value or [])]
        return "" if value is None else str(value)

    def set_status(self, task_id: str, status: TaskStatus | str) -> Task | None:
        return self.update_task(task_id, "status", status)

    def complete_task(self, task_id: str) -> Task | None:
        return self.set_status(task_id, TaskStatus.DONE)

    def remove_task(self, task_id: str) -> bool:
        task = self._index.pop(task_id, None)
        if task is None:
            return False
        self._tasks.remove(task)
        logger.debug("Task removed id=%s", task_id)
        return True

    def duplicate_task(self, task_id: str) -> Task | None:
        src = self._index.get(task_id)
        if src is None:
            return None
        copy = replace(
            src,
            id=self._new_id(),
            title=f"{src.title} (Copy)",
            tags=list(src.tags),
            extra=dict(src.extra),
        )
        self._tasks.append(copy)
        self._index[copy.id] = copy
        logger.debug("Task duplicated src=%s new=%s", task_id, copy.id)
        return copy

    # ---- reference lists ----

    @staticmethod
    def _add_name(names: list[str], name: str) -> bool:
        clean = (name or "").strip()
        if not clean or clean in names:
            return False
        names.append(clean)
        return True

    @staticmethod
    def _remove_name(names: list[str], name: str) -> bool:
        if name not in names:
            return False
        names.remove(name)
        return True

    def add_project(self, name: str) -> bool:
        return self._add_name(self.projects, name)

    def remove_project(self, name: str) -> bool:
        # Tasks keep their (now dangling) project reference.
        return self._remove_name(self.projects, name)

    def add_assignee(self, name: str) -> bool:
        return self._add_name(self.assignees, name)

    def remove_assignee(self, name: str) -> bool:
        return self._remove_name(self.assignees, name)

    # ---- settings / meta ----

    def set_theme(self, theme: Theme | str) -> Theme:
        self.settings.theme = Theme(theme)
        return self.settings.theme

    def toggle_theme(self) -> Theme:
        new_theme = Theme.LIGHT if self.settings.theme is Theme.DARK else Theme.DARK
        return self.set_theme(new_theme)

    def set_default_view(self, view: ViewName | str) -> ViewName:
        self.settings.default_view = ViewName(view)
        return self.settings.default_view

    def set_default_calendar_view(self, view: CalendarView | str) -> CalendarView:
        self.settings.default_calendar_view = CalendarView(view)
        return self.settings.default_calendar_view

    def mark_synced(self, last_sync: str | None) -> None:
        if last_sync:
            self.last_sync = str(last_sync)

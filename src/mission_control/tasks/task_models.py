# src/mission_control/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """Kanban column a task lives in. Order here is the board's column order."""

    BACKLOG = "backlog"
    TODO = "todo"
    DOING = "doing"
    REVIEW = "review"
    DONE = "done"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(str(raw))
        except ValueError:
            return cls.TODO


class Priority(StrEnum):
    """Severity, p0 most urgent."""

    P0 = "p0"
    P1 = "p1"
    P2 = "p2"
    P3 = "p3"

    @classmethod
    def from_raw(cls, raw: Any) -> Priority:
        if not raw:
            return cls.P2
        try:
            return cls(str(raw))
        except ValueError:
            return cls.P2


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"


class ViewName(StrEnum):
    KANBAN = "kanban"
    LIST = "list"
    CALENDAR = "calendar"


class CalendarView(StrEnum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"


class DocumentError(ValueError):
    """A persisted document that is not shaped like a workspace."""


STATUS_ORDER: tuple[TaskStatus, ...] = tuple(TaskStatus)

# Document keys that map onto Task attributes. Anything else in a task object is kept in Task.extra.
TASK_DOCUMENT_KEYS: dict[str, str] = {
    "id": "id",
    "title": "title",
    "project": "project",
    "assignee": "assignee",
    "status": "status",
    "priority": "priority",
    "deadline": "deadline",
    "progress": "progress",
    "effort": "effort",
    "nextAction": "next_action",
    "notes": "notes",
    "tags": "tags",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


def utc_now_iso(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a trailing Z."""
    dt = (now or datetime.now(UTC)).astimezone(UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_deadline(raw: Any) -> date | None:
    """
    Accept a date, a datetime, or an ISO string ("2025-06-01" or a full timestamp).
    Only the calendar date is kept; anything unparseable means "no deadline".
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def clamp_progress(raw: Any) -> int:
    try:
        value = int(float(raw))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, value))


@dataclass(slots=True)
class Task:
    id: str
    title: str
    project: str
    assignee: str
    status: TaskStatus
    priority: Priority
    deadline: date | None
    progress: int
    effort: str
    next_action: str
    notes: str
    tags: list[str]
    created_at: str
    updated_at: str

    # Unknown document keys, written back verbatim.
    extra: dict[str, Any] = field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = dict(self.extra)
        doc.update(
            {
                "id": self.id,
                "title": self.title,
                "project": self.project,
                "status": self.status.value,
                "priority": self.priority.value,
                "assignee": self.assignee,
                "deadline": self.deadline.isoformat() if self.deadline else None,
                "effort": self.effort,
                "progress": self.progress,
                "nextAction": self.next_action,
                "tags": list(self.tags),
                "notes": self.notes,
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
            }
        )
        return doc

    @classmethod
    def from_document(cls, raw: dict[str, Any]) -> Task:
        status = TaskStatus.from_raw(raw.get("status"))
        progress = clamp_progress(raw.get("progress", 0))
        if status is TaskStatus.DONE:
            progress = 100

        tags_raw = raw.get("tags")
        tags = [str(t) for t in tags_raw] if isinstance(tags_raw, list) else []

        return cls(
            id=str(raw["id"]),
            title=str(raw["title"]),
            project=str(raw.get("project") or ""),
            assignee=str(raw.get("assignee") or ""),
            status=status,
            priority=Priority.from_raw(raw.get("priority")),
            deadline=parse_deadline(raw.get("deadline")),
            progress=progress,
            effort=str(raw.get("effort") or "medium"),
            next_action=str(raw.get("nextAction") or ""),
            notes=str(raw.get("notes") or ""),
            tags=tags,
            created_at=str(raw.get("createdAt") or ""),
            updated_at=str(raw.get("updatedAt") or ""),
            extra={k: v for k, v in raw.items() if k not in TASK_DOCUMENT_KEYS},
        )


@dataclass(slots=True)
class WorkspaceSettings:
    theme: Theme = Theme.DARK
    default_view: ViewName = ViewName.KANBAN
    default_calendar_view: CalendarView = CalendarView.MONTH

    def to_document(self) -> dict[str, str]:
        return {
            "theme": self.theme.value,
            "defaultView": self.default_view.value,
            "defaultCalendarView": self.default_calendar_view.value,
        }

    @classmethod
    def from_document(cls, raw: Any) -> WorkspaceSettings:
        if not isinstance(raw, dict):
            return cls()
        return cls(
            theme=_enum_or_default(Theme, raw.get("theme"), Theme.DARK),
            default_view=_enum_or_default(ViewName, raw.get("defaultView"), ViewName.KANBAN),
            default_calendar_view=_enum_or_default(
                CalendarView, raw.get("defaultCalendarView"), CalendarView.MONTH
            ),
        )


def _enum_or_default(enum_cls: Any, raw: Any, default: Any) -> Any:
    if raw is None:
        return default
    try:
        return enum_cls(str(raw))
    except ValueError:
        return default


@dataclass(slots=True, frozen=True)
class DashboardStats:
    active: int
    overdue: int
    done_today: int
    progress_pct: int

# src/mission_control/views/common.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from ..tasks.task_models import Priority

MONTH_ABBR: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

PRIORITY_COLORS: dict[Priority, str] = {
    Priority.P0: "#ef4444",
    Priority.P1: "#f97316",
    Priority.P2: "#eab308",
    Priority.P3: "#9ca3af",
}


class DeadlineKind(StrEnum):
    OVERDUE = "overdue"
    TODAY = "today"
    FUTURE = "future"


@dataclass(slots=True, frozen=True)
class DeadlineBadge:
    label: str
    kind: DeadlineKind


def classify_deadline(deadline: date, today: date) -> DeadlineKind:
    """Day difference between two calendar dates; time of day never matters."""
    diff = (deadline - today).days
    if diff < 0:
        return DeadlineKind.OVERDUE
    if diff == 0:
        return DeadlineKind.TODAY
    return DeadlineKind.FUTURE


def format_short_date(d: date) -> str:
    """'Jun 1' regardless of the process locale."""
    return f"{MONTH_ABBR[d.month - 1]} {d.day}"


def deadline_badge(deadline: date | None, today: date) -> DeadlineBadge | None:
    if deadline is None:
        return None
    return DeadlineBadge(label=format_short_date(deadline), kind=classify_deadline(deadline, today))


def initials(name: str) -> str:
    """'Dana Scully' -> 'DS'. Empty or missing names render as ''."""
    return "".join(part[0] for part in (name or "").split()).upper()

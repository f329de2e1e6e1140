# src/mission_control/views/calendar.py

from __future__ import annotations

import calendar as _cal
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from ..tasks.task_models import CalendarView, Priority, Task
from .common import MONTH_NAMES, PRIORITY_COLORS

WEEKDAY_HEADERS: tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
CHIP_TITLE_LIMIT = 20


@dataclass(slots=True, frozen=True)
class CalendarChip:
    task_id: str
    label: str
    priority: Priority
    color: str


@dataclass(slots=True, frozen=True)
class CalendarCell:
    day: int
    date: date
    in_month: bool
    is_today: bool
    chips: tuple[CalendarChip, ...] = ()


@dataclass(slots=True, frozen=True)
class CalendarMonth:
    title: str
    reference: date
    headers: tuple[str, ...]
    cells: tuple[CalendarCell, ...]

    def cell_for(self, d: date) -> CalendarCell | None:
        for cell in self.cells:
            if cell.in_month and cell.date == d:
                return cell
        return None

    def weeks(self) -> list[tuple[CalendarCell, ...]]:
        """Cells split into rows of seven (the last row may be shorter)."""
        return [self.cells[i : i + 7] for i in range(0, len(self.cells), 7)]


@dataclass(slots=True, frozen=True)
class CalendarPlaceholder:
    title: str
    text: str = "Coming soon"


def _truncate(title: str, limit: int = CHIP_TITLE_LIMIT) -> str:
    return title[:limit] + "..." if len(title) > limit else title


def build_chip(task: Task) -> CalendarChip:
    return CalendarChip(
        task_id=task.id,
        label=_truncate(task.title),
        priority=task.priority,
        color=PRIORITY_COLORS[task.priority],
    )


def tasks_for_date(visible: Iterable[Task], d: date) -> list[Task]:
    return [t for t in visible if t.deadline is not None and t.deadline == d]


def month_title(reference: date) -> str:
    return f"{MONTH_NAMES[reference.month - 1]} {reference.year}"


def project_month(visible: Iterable[Task], reference: date, today: date) -> CalendarMonth:
    """
    Sunday-first month grid.

    Leading cells come from the previous month, as many as the weekday index of
    day 1 (Sunday = 0); then days 1..N of the reference month, each carrying chips
    for visible tasks due that day. No trailing cells are added.
    """
    tasks = list(visible)
    year, month = reference.year, reference.month
    first = date(year, month, 1)
    lead = (first.weekday() + 1) % 7
    days_in_month = _cal.monthrange(year, month)[1]

    cells: list[CalendarCell] = []
    for offset in range(lead, 0, -1):
        d = first - timedelta(days=offset)
        cells.append(CalendarCell(day=d.day, date=d, in_month=False, is_today=False))

    by_date: dict[date, list[Task]] = {}
    for t in tasks:
        if t.deadline is not None and t.deadline.year == year and t.deadline.month == month:
            by_date.setdefault(t.deadline, []).append(t)

    for day in range(1, days_in_month + 1):
        d = date(year, month, day)
        cells.append(
            CalendarCell(
                day=day,
                date=d,
                in_month=True,
                is_today=d == today,
                chips=tuple(build_chip(t) for t in by_date.get(d, [])),
            )
        )

    return CalendarMonth(
        title=month_title(reference),
        reference=reference,
        headers=WEEKDAY_HEADERS,
        cells=tuple(cells),
    )


def project_calendar(
    view: CalendarView | str,
    visible: Iterable[Task],
    reference: date,
    today: date,
) -> CalendarMonth | CalendarPlaceholder:
    cv = CalendarView(view)
    if cv is CalendarView.MONTH:
        return project_month(visible, reference, today)
    if cv is CalendarView.WEEK:
        return CalendarPlaceholder(title="Week View")
    return CalendarPlaceholder(title="Day View")


def shift_reference(reference: date, view: CalendarView | str, direction: int) -> date:
    """
    Move the calendar reference date by whole months, weeks or days.

    Month moves clamp the day to the target month's length (Jan 31 + 1 month = Feb 28/29).
    """
    cv = CalendarView(view)
    if cv is CalendarView.WEEK:
        return reference + timedelta(weeks=direction)
    if cv is CalendarView.DAY:
        return reference + timedelta(days=direction)

    month_index = reference.year * 12 + (reference.month - 1) + direction
    year, month0 = divmod(month_index, 12)
    last_day = _cal.monthrange(year, month0 + 1)[1]
    return date(year, month0 + 1, min(reference.day, last_day))

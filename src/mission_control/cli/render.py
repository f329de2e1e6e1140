# src/mission_control/cli/render.py

"""Plain-text drawing of view projections for the console surface."""

from __future__ import annotations

from ..tasks.task_models import DashboardStats, Task
from ..views.calendar import CalendarMonth, CalendarPlaceholder
from ..views.common import DeadlineBadge
from ..views.kanban import KanbanBoard, KanbanCard
from ..views.list_view import ListTable

CELL_WIDTH = 6
EMPTY_COLUMN = "  (no tasks)"


def render_stats(stats: DashboardStats) -> str:
    return (
        f"Active: {stats.active} | Overdue: {stats.overdue} | "
        f"Done today: {stats.done_today} | Progress: {stats.progress_pct}%"
    )


def _badge(badge: DeadlineBadge | None) -> str:
    if badge is None:
        return ""
    return f" [{badge.label}, {badge.kind.value}]"


def _card_line(card: KanbanCard) -> str:
    project = f"{card.project} / " if card.project else ""
    who = f" ({card.assignee_initials})" if card.assignee_initials else ""
    progress = f" {card.progress}%" if card.progress is not None else ""
    return f"  {card.priority.value.upper()} {project}{card.title}{_badge(card.deadline)}{who}{progress}  #{card.task_id}"


def render_kanban(board: KanbanBoard) -> str:
    lines: list[str] = []
    for col in board.columns:
        lines.append(f"{col.title.upper()} ({col.count})")
        if col.is_empty:
            lines.append(EMPTY_COLUMN)
        lines.extend(_card_line(c) for c in col.cards)
    return "\n".join(lines)


def render_list(table: ListTable) -> str:
    if table.is_empty:
        return "No tasks found"
    rows = [
        (
            r.priority.value.upper(),
            r.title,
            r.project,
            r.assignee_initials,
            r.status.value,
            r.deadline,
            r.progress,
        )
        for r in table.rows
    ]
    widths = [
        max(len(table.headers[i]), *(len(row[i]) for row in rows))
        for i in range(len(table.headers))
    ]
    header = "  ".join(h.ljust(widths[i]) for i, h in enumerate(table.headers))
    body = ["  ".join(v.ljust(widths[i]) for i, v in enumerate(row)).rstrip() for row in rows]
    return "\n".join([header.rstrip(), "-" * len(header.rstrip()), *body])


def render_calendar(view: CalendarMonth | CalendarPlaceholder) -> str:
    if isinstance(view, CalendarPlaceholder):
        return f"{view.title}\n{view.text}"

    lines = [view.title, "".join(h.ljust(CELL_WIDTH) for h in view.headers).rstrip()]
    for week in view.weeks():
        parts: list[str] = []
        for cell in week:
            if not cell.in_month:
                text = f"({cell.day})"
            else:
                text = f"{cell.day}"
                if cell.is_today:
                    text = f"[{cell.day}]"
                if cell.chips:
                    text += "*" * min(len(cell.chips), 2)
            parts.append(text.ljust(CELL_WIDTH))
        lines.append("".join(parts).rstrip())

    due = [cell for cell in view.cells if cell.in_month and cell.chips]
    if due:
        lines.append("")
    for cell in due:
        for chip in cell.chips:
            lines.append(f"  {cell.day:>2} {chip.priority.value.upper()} {chip.label}  #{chip.task_id}")
    return "\n".join(lines)


def render_projection(view: KanbanBoard | ListTable | CalendarMonth | CalendarPlaceholder) -> str:
    if isinstance(view, KanbanBoard):
        return render_kanban(view)
    if isinstance(view, ListTable):
        return render_list(view)
    return render_calendar(view)


def render_task_detail(task: Task) -> str:
    deadline = task.deadline.isoformat() if task.deadline else "-"
    lines = [
        f"#{task.id}  {task.title}",
        f"  project:    {task.project or '-'}",
        f"  assignee:   {task.assignee or '-'}",
        f"  status:     {task.status.value}",
        f"  priority:   {task.priority.value}",
        f"  progress:   {task.progress}%",
        f"  deadline:   {deadline}",
        f"  effort:     {task.effort}",
        f"  nextAction: {task.next_action or '-'}",
        f"  notes:      {task.notes or '-'}",
        f"  updated:    {task.updated_at}",
    ]
    return "\n".join(lines)

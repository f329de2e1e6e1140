# tests/test_views.py

from __future__ import annotations

from datetime import date

from mission_control.tasks.task_models import CalendarView, Priority, TaskStatus
from mission_control.tasks.task_store import TaskStore
from mission_control.views.calendar import (
    CalendarPlaceholder,
    project_calendar,
    project_month,
    shift_reference,
)
from mission_control.views.common import (
    DeadlineKind,
    classify_deadline,
    deadline_badge,
    format_short_date,
    initials,
)
from mission_control.views.kanban import drop_target_status, project_kanban
from mission_control.views.list_view import group_by_project, project_list_table

TODAY = date(2025, 6, 1)


def test_classify_deadline_by_calendar_day() -> None:
    assert classify_deadline(date(2025, 5, 31), TODAY) is DeadlineKind.OVERDUE
    assert classify_deadline(TODAY, TODAY) is DeadlineKind.TODAY
    assert classify_deadline(date(2025, 6, 2), TODAY) is DeadlineKind.FUTURE


def test_small_formatters() -> None:
    assert format_short_date(date(2025, 6, 1)) == "Jun 1"
    assert format_short_date(date(2025, 12, 25)) == "Dec 25"
    assert deadline_badge(None, TODAY) is None
    badge = deadline_badge(date(2025, 5, 30), TODAY)
    assert badge.label == "May 30"
    assert badge.kind is DeadlineKind.OVERDUE
    assert initials("Dana Scully") == "DS"
    assert initials("cher") == "C"
    assert initials("") == ""


def test_kanban_partitions_visible_set(store: TaskStore) -> None:
    board = project_kanban(store.tasks, TODAY)

    assert [c.title for c in board.columns] == ["Backlog", "To Do", "Doing", "Review", "Done"]
    assert board.counts() == {
        TaskStatus.BACKLOG: 1,
        TaskStatus.TODO: 1,
        TaskStatus.DOING: 1,
        TaskStatus.REVIEW: 0,
        TaskStatus.DONE: 1,
    }
    assert board.column("review").is_empty

    design = board.column(TaskStatus.TODO).cards[0]
    assert design.title == "Design review"
    assert design.deadline.kind is DeadlineKind.TODAY
    assert design.assignee_initials == "DS"
    assert design.progress == 30

    login = board.column(TaskStatus.DOING).cards[0]
    assert login.deadline.kind is DeadlineKind.OVERDUE

    grooming = board.column(TaskStatus.BACKLOG).cards[0]
    assert grooming.deadline is None
    # zero progress means no bar
    assert grooming.progress is None


def test_kanban_keeps_insertion_order_within_column(store: TaskStore) -> None:
    store.set_status("task-4", "todo")
    board = project_kanban(store.tasks, TODAY)
    assert [c.task_id for c in board.column("todo").cards] == ["task-1", "task-4"]


def test_drop_target_status(store: TaskStore) -> None:
    task = store.get_task("task-1")
    assert drop_target_status(task, "done") is TaskStatus.DONE
    assert drop_target_status(task, TaskStatus.TODO) is None


def test_list_table_rows(store: TaskStore) -> None:
    table = project_list_table(store.tasks, TODAY)
    assert table.headers == ("Priority", "Task", "Project", "Assignee", "Status", "Deadline", "Progress")
    assert [r.task_id for r in table.rows] == ["task-1", "task-2", "task-3", "task-4"]

    first = table.rows[0]
    assert first.deadline == "Jun 1"
    assert first.deadline_kind is DeadlineKind.TODAY
    assert first.progress == "30%"
    assert first.assignee_initials == "DS"

    last = table.rows[3]
    assert last.deadline == "-"
    assert last.deadline_kind is None
    assert last.progress == "0%"

    assert project_list_table([], TODAY).is_empty


def test_group_by_project_first_appearance_order(store: TaskStore) -> None:
    groups = group_by_project(store.tasks)
    assert [g.project for g in groups] == ["Launch", "Ops"]
    assert groups[0].task_ids == ("task-1", "task-3")
    assert groups[1].titles == ("Fix login", "Backlog grooming")


def test_month_grid_is_sunday_first(store: TaskStore) -> None:
    # June 2025 starts on a Sunday: no leading cells.
    june = project_month(store.tasks, date(2025, 6, 15), TODAY)
    assert june.title == "June 2025"
    assert june.headers[0] == "Sun"
    assert len(june.cells) == 30
    assert all(c.in_month for c in june.cells)

    today_cell = june.cell_for(TODAY)
    assert today_cell.is_today
    assert [chip.task_id for chip in today_cell.chips] == ["task-1"]
    assert june.cell_for(date(2025, 6, 10)).chips[0].priority is Priority.P2

    # May 2025 starts on a Thursday: four leading April days.
    may = project_month(store.tasks, date(2025, 5, 1), TODAY)
    lead = [c for c in may.cells if not c.in_month]
    assert [c.day for c in lead] == [27, 28, 29, 30]
    assert len(may.cells) == 4 + 31
    assert may.cell_for(date(2025, 5, 30)).chips[0].label == "Fix login"
    assert len(may.weeks()[0]) == 7


def test_chip_label_is_truncated(store: TaskStore) -> None:
    store.update_task("task-1", "title", "A very long task title indeed")
    chip = project_month(store.tasks, TODAY, TODAY).cell_for(TODAY).chips[0]
    assert chip.label == "A very long task tit..."
    assert chip.color == "#f97316"


def test_week_and_day_views_are_placeholders(store: TaskStore) -> None:
    week = project_calendar(CalendarView.WEEK, store.tasks, TODAY, TODAY)
    day = project_calendar("day", store.tasks, TODAY, TODAY)
    assert isinstance(week, CalendarPlaceholder)
    assert week.title == "Week View"
    assert day.title == "Day View"
    assert day.text == "Coming soon"


def test_shift_reference() -> None:
    assert shift_reference(date(2025, 1, 31), CalendarView.MONTH, 1) == date(2025, 2, 28)
    assert shift_reference(date(2024, 3, 31), "month", -1) == date(2024, 2, 29)
    assert shift_reference(date(2025, 12, 15), "month", 1) == date(2026, 1, 15)
    assert shift_reference(date(2025, 1, 15), "month", -1) == date(2024, 12, 15)
    assert shift_reference(TODAY, "week", 1) == date(2025, 6, 8)
    assert shift_reference(TODAY, "day", -1) == date(2025, 5, 31)

# src/mission_control/views/list_view.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from ..tasks.task_models import Priority, Task, TaskStatus
from .common import DeadlineKind, classify_deadline, format_short_date, initials

TABLE_HEADERS: tuple[str, ...] = (
    "Priority",
    "Task",
    "Project",
    "Assignee",
    "Status",
    "Deadline",
    "Progress",
)


@dataclass(slots=True, frozen=True)
class ListRow:
    task_id: str
    priority: Priority
    title: str
    project: str
    assignee_initials: str
    status: TaskStatus
    deadline: str
    # None when the task has no deadline.
    deadline_kind: DeadlineKind | None
    progress: str


@dataclass(slots=True, frozen=True)
class ListTable:
    headers: tuple[str, ...]
    rows: tuple[ListRow, ...]

    @property
    def is_empty(self) -> bool:
        return not self.rows


@dataclass(slots=True, frozen=True)
class ListGroup:
    project: str
    task_ids: tuple[str, ...]
    titles: tuple[str, ...]


def build_row(task: Task, today: date) -> ListRow:
    return ListRow(
        task_id=task.id,
        priority=task.priority,
        title=task.title,
        project=task.project,
        assignee_initials=initials(task.assignee),
        status=task.status,
        deadline=format_short_date(task.deadline) if task.deadline else "-",
        deadline_kind=classify_deadline(task.deadline, today) if task.deadline else None,
        progress=f"{task.progress}%",
    )


def project_list_table(visible: Iterable[Task], today: date) -> ListTable:
    """One flat row per task, in store insertion order."""
    return ListTable(headers=TABLE_HEADERS, rows=tuple(build_row(t, today) for t in visible))


def group_by_project(visible: Iterable[Task]) -> tuple[ListGroup, ...]:
    """Groups ordered by first appearance of each project in the visible set."""
    order: list[str] = []
    members: dict[str, list[Task]] = {}
    for task in visible:
        if task.project not in members:
            order.append(task.project)
            members[task.project] = []
        members[task.project].append(task)
    return tuple(
        ListGroup(
            project=project,
            task_ids=tuple(t.id for t in members[project]),
            titles=tuple(t.title for t in members[project]),
        )
        for project in order
    )

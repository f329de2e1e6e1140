# src/mission_control/views/kanban.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from ..tasks.task_models import STATUS_ORDER, Priority, Task, TaskStatus
from .common import DeadlineBadge, deadline_badge, initials

COLUMN_TITLES: dict[TaskStatus, str] = {
    TaskStatus.BACKLOG: "Backlog",
    TaskStatus.TODO: "To Do",
    TaskStatus.DOING: "Doing",
    TaskStatus.REVIEW: "Review",
    TaskStatus.DONE: "Done",
}


@dataclass(slots=True, frozen=True)
class KanbanCard:
    task_id: str
    priority: Priority
    project: str
    title: str
    deadline: DeadlineBadge | None
    assignee_initials: str
    # None means "no progress bar".
    progress: int | None


@dataclass(slots=True, frozen=True)
class KanbanColumn:
    status: TaskStatus
    title: str
    cards: tuple[KanbanCard, ...]

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def is_empty(self) -> bool:
        return not self.cards


@dataclass(slots=True, frozen=True)
class KanbanBoard:
    columns: tuple[KanbanColumn, ...]

    def column(self, status: TaskStatus | str) -> KanbanColumn:
        st = TaskStatus(status)
        for col in self.columns:
            if col.status is st:
                return col
        raise KeyError(st)

    def counts(self) -> dict[TaskStatus, int]:
        return {col.status: col.count for col in self.columns}


def build_card(task: Task, today: date) -> KanbanCard:
    return KanbanCard(
        task_id=task.id,
        priority=task.priority,
        project=task.project,
        title=task.title,
        deadline=deadline_badge(task.deadline, today),
        assignee_initials=initials(task.assignee),
        progress=task.progress if task.progress > 0 else None,
    )


def project_kanban(visible: Iterable[Task], today: date) -> KanbanBoard:
    """
    Partition the visible set into the five status columns.

    Cards keep the store's insertion order inside each column; there is no secondary sort.
    """
    buckets: dict[TaskStatus, list[KanbanCard]] = {st: [] for st in STATUS_ORDER}
    for task in visible:
        buckets[task.status].append(build_card(task, today))
    return KanbanBoard(
        columns=tuple(
            KanbanColumn(status=st, title=COLUMN_TITLES[st], cards=tuple(buckets[st]))
            for st in STATUS_ORDER
        )
    )


def drop_target_status(task: Task, column_status: TaskStatus | str) -> TaskStatus | None:
    """
    Status a dropped card should move to, or None when the drop changes nothing
    (same column).
    """
    target = TaskStatus(column_status)
    if task.status is target:
        return None
    return target

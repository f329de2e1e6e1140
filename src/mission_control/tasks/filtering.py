# src/mission_control/tasks/filtering.py

"""
Visible-set derivation: filters and free-text search.

Filters are conjunctive exact matches on raw values ("all" disables a predicate).
Search is a case-insensitive substring match over title, notes and project.
The two are mutually exclusive view states: a non-empty query overrides the
filters, clearing the query falls back to the last filter selection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from .task_models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)

ALL = "all"


@dataclass(slots=True, frozen=True)
class FilterSelection:
    assignee: str = ALL
    project: str = ALL
    priority: str = ALL

    def matches(self, task: Task) -> bool:
        if self.assignee != ALL and task.assignee != self.assignee:
            return False
        if self.project != ALL and task.project != self.project:
            return False
        if self.priority != ALL and task.priority.value != self.priority:
            return False
        return True

    @property
    def is_empty(self) -> bool:
        return self.assignee == ALL and self.project == ALL and self.priority == ALL


def apply_filters(tasks: Iterable[Task], selection: FilterSelection) -> list[Task]:
    return [t for t in tasks if selection.matches(t)]


def search(tasks: Iterable[Task], query: str) -> list[Task]:
    """An empty query matches every task; VisibleSet treats it as "no search"."""
    q = (query or "").lower()
    return [
        t
        for t in tasks
        if q in t.title.lower() or q in t.notes.lower() or q in t.project.lower()
    ]


class VisibleMode(StrEnum):
    FILTER = "filter"
    SEARCH = "search"


class VisibleSet:
    """Remembers the active filter selection / query and recomputes on demand."""

    def __init__(self, selection: FilterSelection | None = None) -> None:
        self.selection = selection or FilterSelection()
        self.query = ""
        self._tasks: list[Task] = []

    @property
    def mode(self) -> VisibleMode:
        return VisibleMode.SEARCH if self.query else VisibleMode.FILTER

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def set_filters(self, store: TaskStore, selection: FilterSelection) -> list[Task]:
        self.selection = selection
        self.query = ""
        return self.recompute(store)

    def set_query(self, store: TaskStore, query: str) -> list[Task]:
        self.query = (query or "").strip()
        return self.recompute(store)

    def recompute(self, store: TaskStore) -> list[Task]:
        if self.query:
            self._tasks = search(store.tasks, self.query)
        else:
            self._tasks = apply_filters(store.tasks, self.selection)
        logger.debug(
            "Visible set recomputed mode=%s visible=%d total=%d",
            self.mode.value,
            len(self._tasks),
            len(store),
        )
        return list(self._tasks)

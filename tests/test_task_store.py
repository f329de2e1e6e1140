# tests/test_task_store.py

from __future__ import annotations

from datetime import date

import pytest

from mission_control.tasks.task_models import (
    CalendarView,
    DocumentError,
    Priority,
    TaskStatus,
    Theme,
    ViewName,
)
from mission_control.tasks.task_store import TaskStore

from .conftest import NOW, fixed_clock


def test_from_document_reads_tasks_lists_and_settings(store: TaskStore) -> None:
    assert [t.id for t in store.tasks] == ["task-1", "task-2", "task-3", "task-4"]
    assert store.projects == ["Launch", "Ops"]
    assert store.assignees == ["Dana Scully", "Fox Mulder"]
    assert store.settings.theme is Theme.DARK
    assert store.last_sync == "2025-05-31T18:00:00.000Z"

    t1 = store.get_task("task-1")
    assert t1 is not None
    assert t1.status is TaskStatus.TODO
    assert t1.priority is Priority.P1
    assert t1.deadline == date(2025, 6, 1)
    assert t1.next_action == "Book a room"


def test_to_document_keeps_unknown_keys_and_camel_case(sample_document) -> None:
    sample_document["tasks"][0]["color"] = "teal"
    sample_document["custom"] = {"x": 1}
    store = TaskStore.from_document(sample_document, clock=fixed_clock)

    doc = store.to_document()
    assert doc["custom"] == {"x": 1}
    assert doc["meta"] == {"lastSync": "2025-05-31T18:00:00.000Z", "version": 1}
    assert doc["settings"] == {"theme": "dark", "defaultView": "kanban", "defaultCalendarView": "month"}
    first = doc["tasks"][0]
    assert first["color"] == "teal"
    assert first["nextAction"] == "Book a room"
    assert first["deadline"] == "2025-06-01"
    assert doc["tasks"][3]["deadline"] is None


def test_from_document_is_tolerant_of_bad_entries() -> None:
    doc = {
        "tasks": [
            {"id": "a", "title": "ok", "status": "bogus", "priority": "p9", "progress": 250},
            {"title": "no id"},
            "not-a-dict",
            {"id": "d", "title": "finished", "status": "done", "progress": 10},
            {"id": "a", "title": "duplicate id"},
        ],
        "settings": {"theme": "neon"},
    }
    store = TaskStore.from_document(doc, clock=fixed_clock)

    assert [t.id for t in store.tasks] == ["a", "d"]
    a = store.get_task("a")
    assert a is not None
    assert a.status is TaskStatus.TODO
    assert a.priority is Priority.P2
    assert a.progress == 100
    # done always means complete
    assert store.get_task("d").progress == 100
    assert store.settings.theme is Theme.DARK


def test_from_document_rejects_non_objects() -> None:
    with pytest.raises(DocumentError):
        TaskStore.from_document(["not", "a", "workspace"])


def test_empty_store_document_shape() -> None:
    doc = TaskStore.empty(clock=fixed_clock).to_document()
    assert doc["tasks"] == []
    assert doc["projects"] == []
    assert doc["meta"] == {"lastSync": None}


def test_add_task_assigns_id_and_timestamps() -> None:
    store = TaskStore.empty(clock=fixed_clock)
    a = store.add_task(title="  Design review ", project="Launch", deadline="2025-06-03")
    b = store.add_task(title="Second", status="done")

    ms = int(NOW.timestamp() * 1000)
    assert a.id == f"task-{ms}"
    # same millisecond: ids stay unique
    assert b.id == f"task-{ms + 1}"
    assert a.title == "Design review"
    assert a.status is TaskStatus.TODO
    assert a.priority is Priority.P1
    assert a.deadline == date(2025, 6, 3)
    assert a.created_at == a.updated_at == "2025-06-01T12:00:00.000Z"
    assert b.progress == 100


def test_add_task_requires_title_and_valid_enums() -> None:
    store = TaskStore.empty(clock=fixed_clock)
    with pytest.raises(ValueError):
        store.add_task(title="   ")
    with pytest.raises(ValueError):
        store.add_task(title="x", status="later")
    assert len(store) == 0


def test_update_task_restamps_and_coerces(store: TaskStore) -> None:
    task = store.update_task("task-1", "progress", "75")
    assert task is not None
    assert task.progress == 75
    assert task.updated_at == "2025-06-01T12:00:00.000Z"

    store.update_task("task-1", "nextAction", "Send invite")
    store.update_task("task-1", "tags", "design, ux ,")
    store.update_task("task-1", "deadline", "")
    t = store.get_task("task-1")
    assert t.next_action == "Send invite"
    assert t.tags == ["design", "ux"]
    assert t.deadline is None


def test_update_task_rejects_bad_fields(store: TaskStore) -> None:
    with pytest.raises(ValueError):
        store.update_task("task-1", "id", "task-9")
    with pytest.raises(ValueError):
        store.update_task("task-1", "createdAt", "now")
    with pytest.raises(ValueError):
        store.update_task("task-1", "colour", "red")
    with pytest.raises(ValueError):
        store.update_task("task-1", "priority", "urgent")


def test_missing_task_is_a_noop(store: TaskStore) -> None:
    assert store.update_task("nope", "title", "x") is None
    assert store.set_status("nope", "done") is None
    assert store.remove_task("nope") is False
    assert store.duplicate_task("nope") is None
    assert len(store) == 4


def test_done_forces_full_progress(store: TaskStore) -> None:
    task = store.set_status("task-2", TaskStatus.DONE)
    assert task.progress == 100

    store.update_task("task-2", "progress", 10)
    assert store.get_task("task-2").progress == 100

    # leaving done keeps the last progress value
    store.set_status("task-2", "review")
    assert store.get_task("task-2").progress == 100
    store.update_task("task-2", "progress", 10)
    assert store.get_task("task-2").progress == 10


def test_duplicate_task_copies_fields(store: TaskStore) -> None:
    copy = store.duplicate_task("task-1")
    assert copy is not None
    src = store.get_task("task-1")

    assert copy.id != src.id
    assert copy.title == "Design review (Copy)"
    assert copy.project == src.project
    assert copy.deadline == src.deadline
    assert copy.tags == src.tags
    assert copy.tags is not src.tags
    assert store.tasks[-1] is copy


def test_remove_task(store: TaskStore) -> None:
    assert store.remove_task("task-2") is True
    assert store.get_task("task-2") is None
    assert [t.id for t in store.tasks] == ["task-1", "task-3", "task-4"]


def test_reference_lists(store: TaskStore) -> None:
    assert store.add_project("Research") is True
    assert store.add_project("Research") is False
    assert store.add_project("   ") is False
    assert store.remove_project("Launch") is True
    assert store.remove_project("Launch") is False
    assert store.projects == ["Ops", "Research"]
    # tasks keep their project
    assert store.get_task("task-1").project == "Launch"

    assert store.add_assignee("Walter Skinner") is True
    assert store.remove_assignee("Fox Mulder") is True
    assert store.assignees == ["Dana Scully", "Walter Skinner"]


def test_settings_mutations(store: TaskStore) -> None:
    assert store.toggle_theme() is Theme.LIGHT
    assert store.toggle_theme() is Theme.DARK
    assert store.set_default_view("list") is ViewName.LIST
    assert store.set_default_calendar_view(CalendarView.WEEK) is CalendarView.WEEK
    with pytest.raises(ValueError):
        store.set_theme("neon")

    doc = store.to_document()
    assert doc["settings"] == {"theme": "dark", "defaultView": "list", "defaultCalendarView": "week"}


def test_mark_synced_ignores_empty_stamp(store: TaskStore) -> None:
    store.mark_synced(None)
    assert store.last_sync == "2025-05-31T18:00:00.000Z"
    store.mark_synced("2025-06-01T12:00:01.000Z")
    assert store.to_document()["meta"]["lastSync"] == "2025-06-01T12:00:01.000Z"


def test_stats(store: TaskStore) -> None:
    stats = store.stats(today=date(2025, 6, 1))
    assert stats.active == 3
    assert stats.overdue == 1
    assert stats.done_today == 1
    # (30 + 50 + 100 + 0) / 4
    assert stats.progress_pct == 45


def test_stats_on_empty_store() -> None:
    stats = TaskStore.empty(clock=fixed_clock).stats(today=date(2025, 6, 1))
    assert (stats.active, stats.overdue, stats.done_today, stats.progress_pct) == (0, 0, 0, 0)

# src/mission_control/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from pathlib import Path
from typing import Any, cast

from ..core.state import AppState
from ..tasks.filtering import ALL
from ..tasks.task_models import CalendarView, TaskStatus, ViewName
from .render import render_projection, render_stats, render_task_detail

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Any]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Any]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

STATUS_ALIASES: dict[str, TaskStatus] = {
    "b": TaskStatus.BACKLOG,
    "backlog": TaskStatus.BACKLOG,
    "t": TaskStatus.TODO,
    "todo": TaskStatus.TODO,
    "d": TaskStatus.DOING,
    "doing": TaskStatus.DOING,
    "r": TaskStatus.REVIEW,
    "review": TaskStatus.REVIEW,
    "x": TaskStatus.DONE,
    "done": TaskStatus.DONE,
}


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /mv, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Handlers may be plain functions or coroutines.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                result = cast(CommandHandler3, handler)(state, args, emit)
            else:
                result = cast(CommandHandler2, handler)(state, args)
            if inspect.isawaitable(result):
                result = await result
        except ValueError as e:
            # Bad enum values, non-editable fields, empty titles.
            return f"Error: {e}"
        return cast(str, result)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _task_id(raw: str) -> str:
    return raw.lstrip("#")


def _key_values(args: list[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for arg in args:
        if "=" not in arg:
            raise ValueError(f"expected key=value, got {arg!r}")
        k, v = arg.split("=", 1)
        out[k.strip()] = v.strip()
    return out


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_show(state: AppState, args: list[str]) -> str:
    ctl = state.controller
    header = render_stats(ctl.stats())
    mode = f"search: {ctl.visible.query!r}" if ctl.visible.query else "filters"
    if not ctl.visible.query and not ctl.visible.selection.is_empty:
        sel = ctl.visible.selection
        mode = f"filters: assignee={sel.assignee} project={sel.project} priority={sel.priority}"
    return f"{header}\n[{ctl.current_view.value} | {mode}]\n\n{render_projection(ctl.render())}"


def cmd_view(state: AppState, args: list[str]) -> str:
    if args:
        state.controller.switch_view(ViewName(args[0].lower()))
    return cmd_show(state, [])


def cmd_stats(state: AppState, args: list[str]) -> str:
    return render_stats(state.controller.stats())


def cmd_new(state: AppState, args: list[str]) -> str:
    """
    /new title="Design review" project=Launch status=todo priority=p1 assignee=Dana deadline=2025-06-01
    """
    if not args:
        return "Usage: /new title=... [project=] [assignee=] [status=] [priority=] [deadline=] [effort=] [nextAction=] [notes=]"
    task = state.controller.create_task(_key_values(args))
    return f"Created #{task.id} in {task.status.value}."


def cmd_quick(state: AppState, args: list[str]) -> str:
    title = " ".join(args).strip()
    task = state.controller.quick_add(title)
    if task is None:
        return "Title required."
    return f"Created #{task.id} ({task.project}, {task.assignee})."


def cmd_mv(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /mv <id> <status>; statuses: backlog/todo/doing/review/done (b/t/d/r/x)"
    status = STATUS_ALIASES.get(args[1].lower())
    if status is None:
        return "Invalid status."
    ctl = state.controller
    task_id = _task_id(args[0])
    if ctl.drag_start(task_id) is None:
        return f"Task {task_id} not found."
    task = ctl.drop(status)
    if task is None:
        return f"Task {task_id} already in {status.value}."
    return f"Task {task_id} moved to {task.status.value}."


def cmd_done(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /done <id>"
    task = state.controller.complete_task(_task_id(args[0]))
    return f"Task {task.id} done." if task else f"Task {args[0]} not found."


async def cmd_rm(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /rm <id>"
    task_id = _task_id(args[0])
    if state.store.get_task(task_id) is None:
        return f"Task {task_id} not found."
    if await state.controller.delete_task(task_id):
        return f"Task {task_id} removed."
    return "Delete cancelled."


def cmd_dup(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /dup <id>"
    copy = state.controller.duplicate_task(_task_id(args[0]))
    return f"Duplicated as #{copy.id}." if copy else f"Task {args[0]} not found."


def cmd_open(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /open <id>"
    task = state.controller.open_detail(_task_id(args[0]))
    return render_task_detail(task) if task else f"Task {args[0]} not found."


def cmd_set(state: AppState, args: list[str]) -> str:
    """
    /set <field> <value...>  -> edit the task opened with /open
    """
    ctl = state.controller
    if ctl.detail_task_id is None:
        return "No task open. Use /open <id> first."
    if not args:
        return "Usage: /set <field> <value...>"
    task = ctl.edit_field(args[0], " ".join(args[1:]))
    if task is None:
        return "Task no longer exists."
    return render_task_detail(task)


def cmd_close(state: AppState, args: list[str]) -> str:
    state.controller.close_overlays()
    return "Closed."


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter assignee=Dana project=Launch priority=p1
    /filter clear
    """
    if args and args[0].lower() == "clear":
        state.controller.set_filters()
        return cmd_show(state, [])
    kv = _key_values(args)
    unknown = set(kv) - {"assignee", "project", "priority"}
    if unknown:
        return f"Unknown filter(s): {', '.join(sorted(unknown))}"
    state.controller.set_filters(
        assignee=kv.get("assignee", ALL),
        project=kv.get("project", ALL),
        priority=kv.get("priority", ALL),
    )
    return cmd_show(state, [])


def cmd_search(state: AppState, args: list[str]) -> str:
    state.controller.search(" ".join(args))
    return cmd_show(state, [])


def cmd_cal(state: AppState, args: list[str]) -> str:
    """
    /cal month|week|day  -> calendar sub-view
    /cal next|prev|today -> navigate
    """
    ctl = state.controller
    ctl.switch_view(ViewName.CALENDAR)
    sub = args[0].lower() if args else ""
    if sub in ("next", "n"):
        ctl.navigate_calendar(1)
    elif sub in ("prev", "p"):
        ctl.navigate_calendar(-1)
    elif sub == "today":
        ctl.go_to_today()
    elif sub:
        ctl.switch_calendar_view(CalendarView(sub))
    return cmd_show(state, [])


def _ref_list_command(state: AppState, args: list[str], kind: str) -> str:
    ctl = state.controller
    names = state.store.projects if kind == "project" else state.store.assignees
    if not args or args[0].lower() == "list":
        return f"{kind.title()}s: " + (", ".join(names) if names else "(none)")
    sub = args[0].lower()
    name = " ".join(args[1:]).strip()
    if not name:
        return f"Usage: /{kind} add|rm <name>"
    if sub == "add":
        added = ctl.add_project(name) if kind == "project" else ctl.add_assignee(name)
        return f"Added {kind} {name}." if added else f"{kind.title()} {name} already exists."
    if sub in ("rm", "remove"):
        removed = ctl.remove_project(name) if kind == "project" else ctl.remove_assignee(name)
        return f"Removed {kind} {name}." if removed else f"No {kind} named {name}."
    return f"Usage: /{kind} add|rm|list <name>"


def cmd_project(state: AppState, args: list[str]) -> str:
    return _ref_list_command(state, args, "project")


def cmd_assignee(state: AppState, args: list[str]) -> str:
    return _ref_list_command(state, args, "assignee")


def cmd_theme(state: AppState, args: list[str]) -> str:
    if not args or args[0].lower() == "toggle":
        theme = state.controller.toggle_theme()
    else:
        theme = state.controller.set_theme(args[0].lower())
    return f"Theme: {theme.value}"


def cmd_default(state: AppState, args: list[str]) -> str:
    """
    /default view kanban|list|calendar
    /default calendar month|week|day
    """
    if len(args) != 2:
        return "Usage: /default view <kanban|list|calendar> | /default calendar <month|week|day>"
    what, value = args[0].lower(), args[1].lower()
    if what == "view":
        return f"Default view: {state.controller.set_default_view(value).value}"
    if what in ("calendar", "cal"):
        return f"Default calendar view: {state.controller.set_default_calendar_view(value).value}"
    return "Usage: /default view <kanban|list|calendar> | /default calendar <month|week|day>"


async def cmd_save(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    outcome = await state.bridge.save(state.store, immediate=True)
    return f"Synced (lastSync {outcome.last_sync})." if outcome.synced else "Saved locally (remote unavailable)."


async def cmd_export(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        emit("Exporting...")
    exported = await state.controller.export()
    if exported is None:
        return "Export failed (remote store unavailable)."
    export_dir = Path(getattr(state.settings, "export_dir", Path(".")))
    export_dir.mkdir(parents=True, exist_ok=True)
    target = export_dir / Path(exported.filename).name
    target.write_bytes(exported.content)
    logger.info("Export written to %s (%d bytes)", target, len(exported.content))
    return f"Exported to {target}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("show", cmd_show, help_text="Redraw the active view with stats.", aliases=["ls", "r"])
registry.register("view", cmd_view, help_text="Switch view: /view kanban | list | calendar.")
registry.register("stats", cmd_stats, help_text="Show active/overdue/done-today/progress.")
registry.register("new", cmd_new, help_text="Create a task: /new title=... project=... status=... priority=...")
registry.register("quick", cmd_quick, help_text="Quick add: /quick <title...>", aliases=["q"])
registry.register("mv", cmd_mv, help_text="Move a card: /mv <id> <status>.")
registry.register("done", cmd_done, help_text="Mark a task done: /done <id>.")
registry.register("rm", cmd_rm, help_text="Delete a task (asks for confirmation): /rm <id>.")
registry.register("dup", cmd_dup, help_text="Duplicate a task: /dup <id>.")
registry.register("open", cmd_open, help_text="Open the task editor: /open <id>.")
registry.register("set", cmd_set, help_text="Edit the open task: /set <field> <value...>.")
registry.register("close", cmd_close, help_text="Close the editor and overlays.", aliases=["esc"])
registry.register("filter", cmd_filter, help_text="Filter: /filter assignee=.. project=.. priority=.. | /filter clear.")
registry.register("search", cmd_search, help_text="Search title/notes/project: /search <text> (empty clears).", aliases=["s"])
registry.register("cal", cmd_cal, help_text="Calendar: /cal month|week|day|next|prev|today.")
registry.register("project", cmd_project, help_text="Projects: /project list | add <name> | rm <name>.")
registry.register("assignee", cmd_assignee, help_text="Assignees: /assignee list | add <name> | rm <name>.")
registry.register("theme", cmd_theme, help_text="Theme: /theme [light|dark|toggle].")
registry.register("default", cmd_default, help_text="Defaults: /default view <v> | /default calendar <v>.")
registry.register("save", cmd_save, help_text="Write to the remote store now.")
registry.register("export", cmd_export, help_text="Download a timestamped backup into the export dir.")

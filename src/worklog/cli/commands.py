# src/worklog/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from ..core.errors import InvalidInput, NotFound, StorageFailure, WorklogError
from ..core.ports import Requester
from ..core.state import AppState
from ..reports.time_report import AdminReport, SelfReport, build_report
from ..tasks import task_api
from ..tasks.reconciler import ReconcileOutcome
from ..tasks.status_machine import transition
from ..tasks.task_assistant import daily_plan, suggest_description
from ..tasks.task_models import Task
from ..tasks.time_logger import log_time

CommandHandler = Callable[[AppState, list[str], Requester], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /status, ...)."""

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

    def handle(self, state: AppState, line: str, requester: Requester | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Operation errors are rendered as replies; StorageFailure is logged.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        who = requester or state.requester
        try:
            return handler(state, args, who)
        except NotFound as e:
            return f"Not found: {e}"
        except InvalidInput as e:
            return f"Invalid input: {e}"
        except StorageFailure:
            logger.exception("Command /%s failed in storage user=%s", name, who.user_id)
            return "Storage error, please retry."
        except WorklogError as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def _fmt_task(task: Task) -> str:
    return f"{task.id}  [{task.status.value}]  {task.title}  ({task.total_minutes} min)"


def _parse_minutes(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"minutes must be an integer, got {raw!r}") from None


def cmd_help(state: AppState, args: list[str], requester: Requester) -> str:
    return registry.build_help()


def cmd_whoami(state: AppState, args: list[str], requester: Requester) -> str:
    role = "admin" if requester.is_admin else "user"
    return f"Signed in as {requester.user_id} ({role})."


def cmd_new(state: AppState, args: list[str], requester: Requester) -> str:
    """
    /new <title>                  -> create a todo task
    /new <title> -- <description> -> with description
    """
    if not args:
        return "Usage: /new <title> [-- description]"
    description: str | None = None
    if "--" in args:
        i = args.index("--")
        title = " ".join(args[:i])
        description = " ".join(args[i + 1:]) or None
    else:
        title = " ".join(args)

    task = task_api.create_task(state.store, requester.user_id, title=title, description=description)
    return f"Task created: {_fmt_task(task)}"


def cmd_tasks(state: AppState, args: list[str], requester: Requester) -> str:
    """
    /tasks          -> all my tasks
    /tasks <status> -> filter by todo | in_progress | done
    """
    listing = task_api.list_tasks(state.store, requester.user_id, status=args[0] if args else None)
    if listing.is_empty:
        return listing.message
    lines = [listing.message + ":"]
    lines.extend(f"  {_fmt_task(t)}" for t in listing.tasks)
    return "\n".join(lines)


def cmd_show(state: AppState, args: list[str], requester: Requester) -> str:
    if len(args) != 1:
        return "Usage: /show <task_id>"
    task = task_api.get_task(state.store, args[0], requester.user_id)
    entries = state.store.list_entries(task.id, requester.user_id)
    lines = [_fmt_task(task)]
    if task.description:
        lines.append(f"  {task.description}")
    lines.append(f"  created {_fmt_ts(task.created_at)}, updated {_fmt_ts(task.updated_at)}")
    for e in entries:
        source = "auto" if e.auto else "manual"
        lines.append(f"  - {_fmt_ts(e.logged_at)}  {e.minutes} min  ({source})")
    return "\n".join(lines)


def cmd_rename(state: AppState, args: list[str], requester: Requester) -> str:
    if len(args) < 2:
        return "Usage: /rename <task_id> <new title>"
    task = task_api.update_task(state.store, args[0], requester.user_id, title=" ".join(args[1:]))
    return f"Task updated: {_fmt_task(task)}"


def cmd_delete(state: AppState, args: list[str], requester: Requester) -> str:
    if len(args) != 1:
        return "Usage: /delete <task_id>"
    task_api.delete_task(state.store, args[0], requester.user_id)
    return f"Task {args[0]} deleted."


def cmd_status(state: AppState, args: list[str], requester: Requester) -> str:
    """/status <task_id> <todo|in_progress|done>"""
    if len(args) != 2:
        return "Usage: /status <task_id> <todo|in_progress|done>"
    result = transition(state.store, args[0], requester.user_id, args[1])

    reply = f"Task {result.task_id}: {result.previous_status.value} -> {result.status.value}."
    if result.outcome is ReconcileOutcome.COMMITTED:
        if result.auto_time_logged:
            reply += " Estimated time auto-logged."
        if result.auto_time_removed:
            reply += " Auto-logged time removed."
    elif result.side_effect_failed:
        reply += " (time ledger update failed; status change kept)"
    else:
        reply += " (task changed again meanwhile; time ledger left to that change)"
    return reply


def cmd_log(state: AppState, args: list[str], requester: Requester) -> str:
    """/log <task_id> <minutes>"""
    if len(args) != 2:
        return "Usage: /log <task_id> <minutes>"
    entry = log_time(state.store, args[0], requester.user_id, _parse_minutes(args[1]))
    return f"Logged {entry.minutes} min on task {entry.task_id} at {_fmt_ts(entry.logged_at)}."


def cmd_suggest(state: AppState, args: list[str], requester: Requester) -> str:
    """/suggest <title> -> draft a task description"""
    if not args:
        return "Usage: /suggest <title>"
    suggestion = suggest_description(" ".join(args), state.llm)
    return f"{suggestion.message}:\n\n{suggestion.description}"


def cmd_plan(state: AppState, args: list[str], requester: Requester) -> str:
    plan = daily_plan(state.store, requester.user_id, state.llm)
    return f"{plan.message}:\n\n{plan.plan}"


def _render_self(report: SelfReport) -> str:
    if report.is_empty:
        return report.message
    lines = [f"Time report for {report.user_id} ({report.total_minutes} min total):"]
    for d in report.days:
        lines.append(f"  {d.date}  {d.total_minutes} min  ({d.log_count} log(s))")
    return "\n".join(lines)


def _render_admin(report: AdminReport) -> str:
    if report.is_empty:
        return report.message
    s = report.summary
    lines = [
        "Time report (all users):",
        f"  {s.total_days} day(s), {s.total_minutes} min total "
        f"({s.auto_logged_minutes} auto, {s.manual_logged_minutes} manual)",
    ]
    for d in report.days:
        lines.append(
            f"  {d.date}  {d.total_minutes} min  ({d.log_count} log(s); "
            f"{d.auto_logged_minutes} auto, {d.manual_logged_minutes} manual)"
        )
        for u in d.users:
            source = "auto" if u.auto else "manual"
            lines.append(f"    {u.username}: {u.minutes} min ({u.log_count} log(s), {source})")
    return "\n".join(lines)


def cmd_report(state: AppState, args: list[str], requester: Requester) -> str:
    report = build_report(state.store, requester.user_id, requester.is_admin)
    if isinstance(report, AdminReport):
        return _render_admin(report)
    return _render_self(report)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("whoami", cmd_whoami, help_text="Show the current identity.")
registry.register("new", cmd_new, help_text="Create a task: /new <title> [-- description].")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [todo|in_progress|done].", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show a task and its time entries: /show <id>.")
registry.register("rename", cmd_rename, help_text="Rename a task: /rename <id> <title>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("status", cmd_status, help_text="Change status: /status <id> <todo|in_progress|done>.")
registry.register("log", cmd_log, help_text="Log time: /log <id> <minutes> (1-1440).")
registry.register("report", cmd_report, help_text="Daily time report (all users for admins).")
registry.register("suggest", cmd_suggest, help_text="Draft a task description: /suggest <title>.")
registry.register("plan", cmd_plan, help_text="Suggest a daily plan from your tasks.")

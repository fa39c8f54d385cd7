"""
Task Commands.

list, get, create, put, patch and delete against /tasks. These are
top-level commands, registered on the root app by register() together
with their hidden aliases (ls, show, del, rm, remove).
"""

import asyncio
from enum import Enum
from typing import Any, Optional

import typer

from reclaim_cli.api.models import (
    CompletionFilter,
    CreateTaskRequest,
    EventCategory,
    Priority,
    Task,
    filter_by_completion,
)
from reclaim_cli.cli.errors import handle_errors
from reclaim_cli.cli.formatting import (
    delete_output,
    emit_json,
    emit_text,
    render_delete,
    render_task,
    render_task_list,
    render_task_mutation,
)
from reclaim_cli.cli.payloads import (
    build_create_task_request,
    build_patch_payload,
    build_put_payload,
    parse_body_flags,
    require_put_body,
)
from reclaim_cli.cli.state import (
    API_KEY_OPTION,
    BASE_URL_OPTION,
    FORMAT_OPTION,
    TIMEOUT_OPTION,
    CliState,
    OutputFormat,
    get_state,
)
from reclaim_cli.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


class Switch(str, Enum):
    TRUE = "true"
    FALSE = "false"


JSON_HELP = "Request body as a JSON object literal"
SET_HELP = "Field override KEY=VALUE (repeatable; VALUE parsed as JSON when possible)"
NOTIFICATION_KEY_HELP = "Optional notificationKey query parameter"


def register(app: typer.Typer) -> None:
    """Add the task commands and their aliases to the root app."""
    app.command("list")(list_tasks)
    app.command("ls", hidden=True)(list_tasks)
    app.command("get")(get_task)
    app.command("show", hidden=True)(get_task)
    app.command("create")(create_task)
    app.command("put")(put_task)
    app.command("patch")(patch_task)
    app.command("delete")(delete_task)
    for alias in ("del", "rm", "remove"):
        app.command(alias, hidden=True)(delete_task)


def _emit_task_mutation(state: CliState, prefix: str, task: Task) -> None:
    if state.wants_json:
        emit_json(task.to_api())
    else:
        emit_text(render_task_mutation(prefix, task))


# =============================================================================
# list
# =============================================================================


def list_tasks(
    ctx: typer.Context,
    include_all: bool = typer.Option(
        False, "--all", "-a", help="Include archived, cancelled and deleted tasks",
    ),
    completion: Optional[CompletionFilter] = typer.Option(
        None, "--filter", case_sensitive=False, help="Only open or only completed tasks",
    ),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """
    List tasks (alias: ls).

    Examples:
        reclaim list
        reclaim list --all --filter completed
        reclaim list --format json
    """
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        asyncio.run(_list_tasks(state, include_all, completion))


async def _list_tasks(
    state: CliState,
    include_all: bool,
    completion: CompletionFilter | None,
) -> None:
    """Async implementation of list command."""
    client = state.client()
    try:
        tasks = await client.list_tasks(include_all)
    finally:
        await client.close()

    tasks = filter_by_completion(tasks, completion)
    log_with_source(logger, "cli", "info", "Listed tasks", count=len(tasks))

    if state.wants_json:
        emit_json([task.to_api() for task in tasks])
    else:
        emit_text(render_task_list(tasks, include_all, completion))


# =============================================================================
# get
# =============================================================================


def get_task(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task ID"),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """Show one task (alias: show)."""
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        asyncio.run(_get_task(state, task_id))


async def _get_task(state: CliState, task_id: int) -> None:
    client = state.client()
    try:
        task = await client.get_task(task_id)
    finally:
        await client.close()

    if state.wants_json:
        emit_json(task.to_api())
    else:
        emit_text(render_task(task))


# =============================================================================
# create
# =============================================================================


def create_task(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", help="Task title"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Task notes"),
    priority: Optional[Priority] = typer.Option(None, "--priority", help="Priority"),
    due: Optional[str] = typer.Option(
        None, "--due", help="Due date/time in ISO 8601, e.g. 2026-02-19T15:00:00Z",
    ),
    time_chunks_required: Optional[int] = typer.Option(
        None, "--time-chunks-required", min=1, help="Total time in 15-minute chunks",
    ),
    event_category: Optional[EventCategory] = typer.Option(
        None, "--event-category", help="Event category (API default: WORK)",
    ),
    min_chunk_size: Optional[int] = typer.Option(
        None, "--min-chunk-size", min=1, help="Minimum chunk size (default 1)",
    ),
    max_chunk_size: Optional[int] = typer.Option(
        None, "--max-chunk-size", min=1, help="Maximum chunk size (default --time-chunks-required)",
    ),
    always_private: Optional[Switch] = typer.Option(
        None, "--always-private", help="Keep scheduled events private (API default: true)",
    ),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """
    Create a task. Only the fields you pass are sent.

    Examples:
        reclaim create --title "Plan sprint"
        reclaim create --title "Write report" --priority P2 --time-chunks-required 8 --max-chunk-size 4
    """
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        request = build_create_task_request(
            title=title,
            notes=notes,
            priority=priority,
            due=due,
            time_chunks_required=time_chunks_required,
            event_category=event_category,
            min_chunk_size=min_chunk_size,
            max_chunk_size=max_chunk_size,
            always_private=None if always_private is None else always_private is Switch.TRUE,
        )
        asyncio.run(_create_task(state, request))


async def _create_task(state: CliState, request: CreateTaskRequest) -> None:
    client = state.client()
    try:
        task = await client.create_task(request)
    finally:
        await client.close()

    log_with_source(logger, "cli", "info", "Created task", task_id=task.id)
    _emit_task_mutation(state, "Created", task)


# =============================================================================
# put / patch
# =============================================================================


def put_task(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task ID"),
    json_body: Optional[str] = typer.Option(None, "--json", help=JSON_HELP),
    set_entries: Optional[list[str]] = typer.Option(None, "--set", help=SET_HELP),
    notification_key: Optional[str] = typer.Option(
        None, "--notification-key", help=NOTIFICATION_KEY_HELP,
    ),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """
    Replace a task (PUT).

    With --set only, the current task is fetched and the overrides are
    applied on top of it.

    Examples:
        reclaim put 42 --json '{"title":"Plan sprint","priority":"P2"}'
        reclaim put 42 --set priority=P2
    """
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        body, updates = parse_body_flags(json_body, set_entries)
        require_put_body(body, updates)
        asyncio.run(_put_task(state, task_id, body, updates, notification_key))


async def _put_task(
    state: CliState,
    task_id: int,
    body: dict[str, Any] | None,
    updates: dict[str, Any],
    notification_key: str | None,
) -> None:
    client = state.client()
    try:
        existing = None
        if body is None:
            existing = (await client.get_task(task_id)).to_api()
        payload = build_put_payload(body, updates, existing)
        task = await client.put_task(task_id, payload, notification_key)
    finally:
        await client.close()

    _emit_task_mutation(state, "Updated (PUT)", task)


def patch_task(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task ID"),
    json_body: Optional[str] = typer.Option(None, "--json", help=JSON_HELP),
    set_entries: Optional[list[str]] = typer.Option(None, "--set", help=SET_HELP),
    notification_key: Optional[str] = typer.Option(
        None, "--notification-key", help=NOTIFICATION_KEY_HELP,
    ),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """
    Update selected task fields (PATCH).

    Examples:
        reclaim patch 42 --set priority=P4 --set snoozeUntil=2026-02-25T17:00:00Z
        reclaim patch 42 --json '{"notes":"moved to Friday"}'
    """
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        body, updates = parse_body_flags(json_body, set_entries)
        payload = build_patch_payload(body, updates)
        asyncio.run(_patch_task(state, task_id, payload, notification_key))


async def _patch_task(
    state: CliState,
    task_id: int,
    payload: dict[str, Any],
    notification_key: str | None,
) -> None:
    client = state.client()
    try:
        task = await client.patch_task(task_id, payload, notification_key)
    finally:
        await client.close()

    _emit_task_mutation(state, "Updated (PATCH)", task)


# =============================================================================
# delete
# =============================================================================


def delete_task(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task ID"),
    notification_key: Optional[str] = typer.Option(
        None, "--notification-key", help=NOTIFICATION_KEY_HELP,
    ),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """Delete a task (aliases: del, rm, remove)."""
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        asyncio.run(_delete_task(state, task_id, notification_key))


async def _delete_task(state: CliState, task_id: int, notification_key: str | None) -> None:
    client = state.client()
    try:
        response = await client.delete_task(task_id, notification_key)
    finally:
        await client.close()

    log_with_source(logger, "cli", "info", "Deleted task", task_id=task_id)

    if state.wants_json:
        emit_json(delete_output(task_id, response))
    else:
        emit_text(render_delete(task_id, response))

"""
Event Commands.

Read calendar events and change them through schedule actions. Create,
update and delete each send one action to
POST /schedule-actions/apply-actions; apply sends a raw action batch.
"""

import asyncio
from typing import Any, Optional

import typer

from reclaim_cli.api.models import (
    DEFAULT_POLICY_ID,
    EventListQuery,
    Priority,
    Transparency,
    Visibility,
)
from reclaim_cli.cli.errors import handle_errors
from reclaim_cli.cli.formatting import (
    emit_json,
    emit_text,
    event_mutation_output,
    render_apply_response,
    render_event,
    render_event_list,
    render_event_mutation,
)
from reclaim_cli.cli.payloads import (
    EventCreateOptions,
    EventDeleteOptions,
    EventUpdateOptions,
    build_event_create_request,
    build_event_delete_request,
    build_event_update_request,
    build_events_apply_request,
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

app = typer.Typer(help="Calendar events and schedule actions", no_args_is_help=True)

POLICY_HELP = "Scheduling policy UUID"
JSON_HELP = "Fields merged over the action, as a JSON object literal"
SET_HELP = "Field override KEY=VALUE merged over the action (repeatable)"


def _flag(value: bool) -> bool | None:
    """Boolean switches are only sent when turned on."""
    return True if value else None


# =============================================================================
# Read
# =============================================================================


@app.command("list")
def list_events(
    ctx: typer.Context,
    calendar_ids: Optional[list[int]] = typer.Option(
        None, "--calendar-id", help="Calendar ID (repeatable)",
    ),
    all_connected: bool = typer.Option(
        False, "--all-connected", help="Include all connected calendars",
    ),
    start: Optional[str] = typer.Option(None, "--start", help="Range start (ISO 8601)"),
    end: Optional[str] = typer.Option(None, "--end", help="Range end (ISO 8601)"),
    source_details: bool = typer.Option(
        False, "--source-details", help="Include source details",
    ),
    thin: bool = typer.Option(False, "--thin", help="Request thin event records"),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """
    List calendar events.

    Examples:
        reclaim events list --calendar-id 7 --start 2026-02-21T00:00:00Z --end 2026-02-22T00:00:00Z
        reclaim --format json events list --all-connected
    """
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    query = EventListQuery(
        calendar_ids=list(calendar_ids or []),
        all_connected=_flag(all_connected),
        start=start,
        end=end,
        source_details=_flag(source_details),
        thin=_flag(thin),
    )
    with handle_errors():
        asyncio.run(_list_events(state, query))


async def _list_events(state: CliState, query: EventListQuery) -> None:
    """Async implementation of list command."""
    client = state.client()
    try:
        events = await client.list_events(query)
    finally:
        await client.close()

    log_with_source(logger, "cli", "info", "Listed events", count=len(events))

    if state.wants_json:
        emit_json([event.to_api() for event in events])
    else:
        emit_text(render_event_list(events))


@app.command("get")
def get_event(
    ctx: typer.Context,
    calendar_id: int = typer.Argument(..., help="Calendar ID"),
    event_id: str = typer.Argument(..., help="Event ID"),
    source_details: bool = typer.Option(
        False, "--source-details", help="Include source details",
    ),
    thin: bool = typer.Option(False, "--thin", help="Request a thin event record"),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """Show one event."""
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        asyncio.run(
            _get_event(state, calendar_id, event_id, _flag(source_details), _flag(thin))
        )


async def _get_event(
    state: CliState,
    calendar_id: int,
    event_id: str,
    source_details: bool | None,
    thin: bool | None,
) -> None:
    client = state.client()
    try:
        event = await client.get_event(calendar_id, event_id, source_details, thin)
    finally:
        await client.close()

    if state.wants_json:
        emit_json(event.to_api())
    else:
        emit_text(render_event(event))


# =============================================================================
# Schedule actions
# =============================================================================


async def _apply(state: CliState, payload: dict[str, Any]) -> Any:
    client = state.client()
    try:
        return await client.apply_schedule_actions(payload)
    finally:
        await client.close()


def _emit_mutation(
    state: CliState,
    operation: str,
    calendar_id: int,
    event_id: str | None,
    response: Any,
) -> None:
    output = event_mutation_output(operation, calendar_id, event_id, response)
    log_with_source(
        logger, "cli", "info", "Applied event action",
        operation=operation, calendar_id=calendar_id, event_id=event_id,
    )
    if state.wants_json:
        emit_json(output)
    else:
        emit_text(render_event_mutation(output))


@app.command("create")
def create_event(
    ctx: typer.Context,
    calendar_id: int = typer.Argument(..., help="Calendar ID"),
    title: str = typer.Option(..., "--title", help="Event title"),
    start: str = typer.Option(..., "--start", help="Start time (ISO 8601)"),
    end: str = typer.Option(..., "--end", help="End time (ISO 8601)"),
    policy_id: str = typer.Option(DEFAULT_POLICY_ID, "--policy-id", help=POLICY_HELP),
    attendees: Optional[list[str]] = typer.Option(
        None, "--attendee", help="Attendee email (repeatable)",
    ),
    description: Optional[str] = typer.Option(None, "--description", help="Description"),
    location: Optional[str] = typer.Option(None, "--location", help="Location"),
    priority: Optional[Priority] = typer.Option(None, "--priority", help="Priority"),
    visibility: Optional[Visibility] = typer.Option(None, "--visibility", help="Visibility"),
    transparency: Optional[Transparency] = typer.Option(
        None, "--transparency", help="Busy (OPAQUE) or free (TRANSPARENT)",
    ),
    guests_can_modify: bool = typer.Option(
        False, "--guests-can-modify/--no-guests-can-modify", help="Guests may modify the event",
    ),
    guests_can_invite_others: bool = typer.Option(
        True, "--guests-can-invite-others/--no-guests-can-invite-others",
        help="Guests may invite others",
    ),
    guests_can_see_other_guests: bool = typer.Option(
        True, "--guests-can-see-other-guests/--no-guests-can-see-other-guests",
        help="Guests may see the guest list",
    ),
    json_body: Optional[str] = typer.Option(None, "--json", help=JSON_HELP),
    set_entries: Optional[list[str]] = typer.Option(None, "--set", help=SET_HELP),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """
    Create an event (AddEventAction).

    Examples:
        reclaim events create 7 --title "Sync" --start 2026-02-21T18:30:00Z --end 2026-02-21T19:00:00Z
        reclaim events create 7 --title "Sync" --start ... --end ... --attendee a@example.com
    """
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        payload = build_event_create_request(EventCreateOptions(
            calendar_id=calendar_id,
            title=title,
            start=start,
            end=end,
            policy_id=policy_id,
            attendees=list(attendees or []),
            description=description,
            location=location,
            priority=priority,
            visibility=visibility,
            transparency=transparency,
            guests_can_modify=guests_can_modify,
            guests_can_invite_others=guests_can_invite_others,
            guests_can_see_other_guests=guests_can_see_other_guests,
            json_body=json_body,
            set_entries=list(set_entries or []),
        ))
        response = asyncio.run(_apply(state, payload))
        _emit_mutation(state, "create", calendar_id, None, response)


@app.command("update")
def update_event(
    ctx: typer.Context,
    calendar_id: int = typer.Argument(..., help="Calendar ID"),
    event_id: str = typer.Argument(..., help="Event ID"),
    policy_id: str = typer.Option(DEFAULT_POLICY_ID, "--policy-id", help=POLICY_HELP),
    title: Optional[str] = typer.Option(None, "--title", help="New title"),
    description: Optional[str] = typer.Option(None, "--description", help="New description"),
    location: Optional[str] = typer.Option(None, "--location", help="New location"),
    priority: Optional[Priority] = typer.Option(None, "--priority", help="New priority"),
    visibility: Optional[Visibility] = typer.Option(None, "--visibility", help="New visibility"),
    transparency: Optional[Transparency] = typer.Option(
        None, "--transparency", help="New transparency",
    ),
    start: Optional[str] = typer.Option(None, "--start", help="New start (requires --end)"),
    end: Optional[str] = typer.Option(None, "--end", help="New end (requires --start)"),
    json_body: Optional[str] = typer.Option(None, "--json", help=JSON_HELP),
    set_entries: Optional[list[str]] = typer.Option(None, "--set", help=SET_HELP),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """
    Update an event (UpdateEventAction). At least one field must change.

    Examples:
        reclaim events update 7 abc123 --title "Team sync"
        reclaim events update 7 abc123 --start 2026-02-21T19:00:00Z --end 2026-02-21T19:30:00Z
    """
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        payload = build_event_update_request(EventUpdateOptions(
            calendar_id=calendar_id,
            event_id=event_id,
            policy_id=policy_id,
            title=title,
            description=description,
            location=location,
            priority=priority,
            visibility=visibility,
            transparency=transparency,
            start=start,
            end=end,
            json_body=json_body,
            set_entries=list(set_entries or []),
        ))
        response = asyncio.run(_apply(state, payload))
        _emit_mutation(state, "update", calendar_id, event_id, response)


@app.command("delete")
def delete_event(
    ctx: typer.Context,
    calendar_id: int = typer.Argument(..., help="Calendar ID"),
    event_id: str = typer.Argument(..., help="Event ID"),
    policy_id: str = typer.Option(DEFAULT_POLICY_ID, "--policy-id", help=POLICY_HELP),
    message: Optional[str] = typer.Option(
        None, "--message", help="Notification message sent to attendees",
    ),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """Cancel an event (CancelEventAction)."""
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        payload = build_event_delete_request(EventDeleteOptions(
            calendar_id=calendar_id,
            event_id=event_id,
            policy_id=policy_id,
            message=message,
        ))
        response = asyncio.run(_apply(state, payload))
        _emit_mutation(state, "delete", calendar_id, event_id, response)


@app.command("apply")
def apply_actions(
    ctx: typer.Context,
    json_body: str = typer.Option(
        ..., "--json", help="Full apply-actions request with a non-empty actionsTaken array",
    ),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """
    Send a raw schedule-actions batch.

    Example:
        reclaim events apply --json '{"actionsTaken":[{"type":"CancelEventAction","hash":"","policyId":"...","eventKey":"7/abc123"}]}'
    """
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        payload = build_events_apply_request(json_body)
        response = asyncio.run(_apply(state, payload))

        if state.wants_json:
            emit_json(response)
        else:
            emit_text(render_apply_response(response))

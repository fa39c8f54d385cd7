"""
Request Payload Builders.

Pure functions turning parsed command-line flags into API request bodies.
All validation of local input happens here, before any client exists, so
a bad flag never costs a network round trip.

Body flags:
    --json '{"priority":"P4"}'     one JSON object literal
    --set priority=P4 --set x=1    repeated KEY=VALUE overrides

The two are mutually exclusive. --set values are parsed as JSON literals
(true, null, numbers, arrays, objects) and fall back to plain strings.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from reclaim_cli.api.models import (
    DEFAULT_POLICY_ID,
    CreateTaskRequest,
    EventCategory,
    Priority,
    Transparency,
    Visibility,
)
from reclaim_cli.core.exceptions import InvalidInputError

SET_EXAMPLES = "Examples: --set priority=P4 --set snoozeUntil=2026-02-25T17:00:00Z"
TIME_RANGE_EXAMPLE = "--start 2026-02-21T18:30:00Z --end 2026-02-21T19:00:00Z"
ACTION_IDENTITY_KEYS = frozenset({"type", "hash", "policyId", "calendarId", "eventId"})


# =============================================================================
# --json / --set
# =============================================================================


def parse_json_object(raw_json: str, flag_name: str = "--json") -> dict[str, Any]:
    """Parse a flag value that must be a JSON object literal."""
    hint = f"Pass {flag_name} with a JSON object, e.g. {flag_name} '{{\"priority\":\"P4\"}}'."

    raw_json = raw_json.strip()
    if not raw_json:
        raise InvalidInputError(f"Invalid {flag_name} value: it cannot be empty.", hint=hint)

    try:
        parsed = json.loads(raw_json)
    except ValueError as e:
        raise InvalidInputError(f"Invalid {flag_name} JSON: {e}", hint=hint) from e

    if not isinstance(parsed, dict):
        raise InvalidInputError(
            f"Invalid {flag_name} value: expected a JSON object.", hint=hint,
        )
    return parsed


def parse_set_value(raw_value: str) -> Any:
    try:
        return json.loads(raw_value)
    except ValueError:
        return raw_value


def parse_set_entry(entry: str) -> tuple[str, Any]:
    """Split one KEY=VALUE token. The error names the offending token."""
    raw_key, separator, raw_value = entry.partition("=")
    if not separator:
        raise InvalidInputError(
            f"Invalid --set value '{entry}'. Expected KEY=VALUE.",
            hint=SET_EXAMPLES,
        )

    key = raw_key.strip()
    if not key:
        raise InvalidInputError(
            f"Invalid --set value '{entry}': key cannot be empty.",
            hint="Use a non-empty key, e.g. --set priority=P4",
        )

    return key, parse_set_value(raw_value.strip())


def parse_set_entries(entries: list[str] | None) -> dict[str, Any]:
    updates: dict[str, Any] = {}
    for entry in entries or []:
        key, value = parse_set_entry(entry)
        updates[key] = value
    return updates


def parse_body_flags(
    raw_json: str | None,
    set_entries: list[str] | None,
) -> tuple[dict[str, Any] | None, dict[str, Any]]:
    """
    Validate the body flags of a write command.

    Returns:
        (json object or None, --set updates)

    Raises:
        InvalidInputError: If both flags are given, or either is malformed
    """
    if raw_json is not None and set_entries:
        raise InvalidInputError(
            "--json and --set cannot be used together.",
            hint="Pass the whole body with --json, or individual fields with repeated --set KEY=VALUE.",
        )

    body = parse_json_object(raw_json) if raw_json is not None else None
    return body, parse_set_entries(set_entries)


# =============================================================================
# Tasks
# =============================================================================


def require_put_body(body: dict[str, Any] | None, updates: dict[str, Any]) -> None:
    if body is None and not updates:
        raise InvalidInputError(
            "PUT requires update data. Pass --json or one or more --set entries.",
            hint="Examples: --json '{\"title\":\"Plan sprint\"}' or --set priority=P4",
        )


def build_put_payload(
    body: dict[str, Any] | None,
    updates: dict[str, Any],
    existing: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a full-object PUT body.

    With --json the object is sent as given. With --set only, the updates
    are applied over the current task (fetched by the caller).
    """
    require_put_body(body, updates)
    if body is not None:
        return body

    payload = dict(existing or {})
    payload.update(updates)
    return payload


def build_patch_payload(body: dict[str, Any] | None, updates: dict[str, Any]) -> dict[str, Any]:
    payload = dict(body) if body is not None else dict(updates)
    if not payload:
        raise InvalidInputError(
            "PATCH requires at least one field update.",
            hint="Pass --json '{\"priority\":\"P4\"}' or one/more --set KEY=VALUE entries.",
        )
    return payload


def build_create_task_request(
    title: str,
    notes: str | None = None,
    priority: Priority | None = None,
    due: str | None = None,
    time_chunks_required: int | None = None,
    event_category: EventCategory | None = None,
    min_chunk_size: int | None = None,
    max_chunk_size: int | None = None,
    always_private: bool | None = None,
) -> CreateTaskRequest:
    """
    Validate create options and build the POST /tasks body.

    With --time-chunks-required N, the chunk bounds default to 1..N and may
    not exceed N. Chunk bounds without a total are rejected.
    """
    if not title.strip():
        raise InvalidInputError(
            "Invalid --title value: it cannot be empty.",
            hint='Example: --title "Plan sprint"',
        )

    if due is not None and not due.strip():
        raise InvalidInputError(
            "Invalid --due value: it cannot be empty.",
            hint="Use ISO 8601, for example: --due 2026-02-19T15:00:00Z",
        )

    if (min_chunk_size is not None or max_chunk_size is not None) and time_chunks_required is None:
        raise InvalidInputError(
            "Invalid chunk options: --min-chunk-size/--max-chunk-size require --time-chunks-required.",
            hint=(
                "Pass --time-chunks-required with chunk size options, e.g. "
                "--time-chunks-required 4 --min-chunk-size 2 --max-chunk-size 4"
            ),
        )

    if time_chunks_required is not None:
        if min_chunk_size is None:
            min_chunk_size = 1
        if max_chunk_size is None:
            max_chunk_size = time_chunks_required

        if min_chunk_size > time_chunks_required:
            raise InvalidInputError(
                f"Invalid --min-chunk-size value: {min_chunk_size} exceeds "
                f"--time-chunks-required ({time_chunks_required}).",
                hint="Use a min chunk size less than or equal to --time-chunks-required.",
            )
        if max_chunk_size > time_chunks_required:
            raise InvalidInputError(
                f"Invalid --max-chunk-size value: {max_chunk_size} exceeds "
                f"--time-chunks-required ({time_chunks_required}).",
                hint="Use a max chunk size less than or equal to --time-chunks-required.",
            )
        if min_chunk_size > max_chunk_size:
            raise InvalidInputError(
                f"Invalid chunk bounds: --min-chunk-size ({min_chunk_size}) cannot exceed "
                f"--max-chunk-size ({max_chunk_size}).",
                hint="Choose chunk sizes where min <= max.",
            )

    return CreateTaskRequest(
        title=title,
        notes=notes,
        priority=priority,
        due=due,
        time_chunks_required=time_chunks_required,
        min_chunk_size=min_chunk_size,
        max_chunk_size=max_chunk_size,
        event_category=event_category,
        always_private=always_private,
    )


# =============================================================================
# Schedule actions
# =============================================================================


@dataclass
class EventCreateOptions:
    calendar_id: int
    title: str
    start: str
    end: str
    policy_id: str = DEFAULT_POLICY_ID
    attendees: list[str] = field(default_factory=list)
    description: str | None = None
    location: str | None = None
    priority: Priority | None = None
    visibility: Visibility | None = None
    transparency: Transparency | None = None
    guests_can_modify: bool = False
    guests_can_invite_others: bool = True
    guests_can_see_other_guests: bool = True
    json_body: str | None = None
    set_entries: list[str] = field(default_factory=list)


@dataclass
class EventUpdateOptions:
    calendar_id: int
    event_id: str
    policy_id: str = DEFAULT_POLICY_ID
    title: str | None = None
    description: str | None = None
    location: str | None = None
    priority: Priority | None = None
    visibility: Visibility | None = None
    transparency: Transparency | None = None
    start: str | None = None
    end: str | None = None
    json_body: str | None = None
    set_entries: list[str] = field(default_factory=list)


@dataclass
class EventDeleteOptions:
    calendar_id: int
    event_id: str
    policy_id: str = DEFAULT_POLICY_ID
    message: str | None = None


def _clean(value: str | None) -> str | None:
    """Strip a text option; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _policy_id(raw: str) -> str:
    policy_id = raw.strip()
    if not policy_id:
        raise InvalidInputError(
            "Invalid --policy-id value: it cannot be empty.",
            hint=f"Use a UUID, or omit --policy-id to use {DEFAULT_POLICY_ID}.",
        )
    return policy_id


def _date_range(start: str, end: str) -> dict[str, str]:
    return {"type": "FixedDateTimeRange", "start": start, "end": end}


def _optional_fields(
    description: str | None,
    location: str | None,
    priority: Priority | None,
    visibility: Visibility | None,
    transparency: Transparency | None,
) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if _clean(description):
        fields["description"] = _clean(description)
    if _clean(location):
        fields["location"] = _clean(location)
    if priority is not None:
        fields["priority"] = priority.value
    if visibility is not None:
        fields["visibility"] = visibility.value
    if transparency is not None:
        fields["transparency"] = transparency.value
    return fields


def _merge_body_flags(action: dict[str, Any], raw_json: str | None, set_entries: list[str]) -> None:
    body, updates = parse_body_flags(raw_json, set_entries)
    action.update(body if body is not None else updates)


def build_event_create_request(options: EventCreateOptions) -> dict[str, Any]:
    """Wrap an AddEventAction in an actionsTaken batch."""
    start, end = options.start.strip(), options.end.strip()
    if not start or not end:
        raise InvalidInputError(
            "Invalid event time range: --start and --end are required.",
            hint=f"Use ISO 8601 timestamps, e.g. {TIME_RANGE_EXAMPLE}",
        )

    action: dict[str, Any] = {
        "type": "AddEventAction",
        "hash": "",
        "policyId": _policy_id(options.policy_id),
        "eventKey": "",
        "calendarId": options.calendar_id,
        "title": options.title,
        "dateRange": _date_range(start, end),
        "guestsCanModify": options.guests_can_modify,
        "guestsCanInviteOthers": options.guests_can_invite_others,
        "guestsCanSeeOtherGuests": options.guests_can_see_other_guests,
        "attendees": [
            {"email": email.strip()} for email in options.attendees if email.strip()
        ],
    }
    action.update(_optional_fields(
        options.description,
        options.location,
        options.priority,
        options.visibility,
        options.transparency,
    ))
    _merge_body_flags(action, options.json_body, options.set_entries)

    return {"actionsTaken": [action]}


def build_event_update_request(options: EventUpdateOptions) -> dict[str, Any]:
    """Wrap an UpdateEventAction; at least one field must change."""
    policy_id = _policy_id(options.policy_id)

    if (options.start is None) != (options.end is None):
        raise InvalidInputError(
            "Invalid date range update: --start and --end must be passed together.",
            hint="Pass both --start and --end, or neither. For partial advanced updates, use --json.",
        )

    action: dict[str, Any] = {
        "type": "UpdateEventAction",
        "hash": "",
        "policyId": policy_id,
        "calendarId": options.calendar_id,
        "eventId": options.event_id,
    }
    if _clean(options.title):
        action["title"] = _clean(options.title)
    action.update(_optional_fields(
        options.description,
        options.location,
        options.priority,
        options.visibility,
        options.transparency,
    ))

    if options.start is not None and options.end is not None:
        start, end = options.start.strip(), options.end.strip()
        if not start or not end:
            raise InvalidInputError(
                "Invalid date range update: --start and --end cannot be empty.",
                hint=f"Use ISO 8601 timestamps, e.g. {TIME_RANGE_EXAMPLE}",
            )
        action["dateRange"] = _date_range(start, end)

    _merge_body_flags(action, options.json_body, options.set_entries)

    if not set(action) - ACTION_IDENTITY_KEYS:
        raise InvalidInputError(
            "Event update requires at least one field change.",
            hint=(
                "Pass one of: --title/--description/--location/--priority/--start+--end, "
                "or use --json/--set."
            ),
        )

    return {"actionsTaken": [action]}


def build_event_delete_request(options: EventDeleteOptions) -> dict[str, Any]:
    """Wrap a CancelEventAction keyed by <calendarId>/<eventId>."""
    action: dict[str, Any] = {
        "type": "CancelEventAction",
        "hash": "",
        "policyId": _policy_id(options.policy_id),
        "eventKey": f"{options.calendar_id}/{options.event_id}",
    }
    if _clean(options.message):
        action["notificationMessage"] = _clean(options.message)

    return {"actionsTaken": [action]}


def build_events_apply_request(raw_json: str) -> dict[str, Any]:
    request = parse_json_object(raw_json, "--json")
    actions = request.get("actionsTaken")
    if not isinstance(actions, list) or not actions:
        raise InvalidInputError(
            "Invalid --json request: actionsTaken is required and must be a non-empty array.",
            hint="Example: --json '{\"actionsTaken\":[{\"type\":\"CancelEventAction\",...}]}'",
        )
    return request

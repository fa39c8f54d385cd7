"""
Output Formatting.

Renders records as human-readable text or JSON. Renderers are pure and
return strings; emit_text/emit_json write them to stdout.

JSON output is the record exactly as the API returned it (no renaming, no
added defaults). Text output shows a fixed set of fields in a stable order.
"""

import json
from typing import Any

import typer
from rich.console import Console

from reclaim_cli.api.models import CompletionFilter, Event, Task, json_text
from reclaim_cli.core.exceptions import OutputError

JSON_TIP = "Tip: use --format json for machine-readable output."
MUTATION_TIP = "Tip: use --format json for full mutation response."

console = Console(highlight=False, soft_wrap=True, emoji=False)


def emit_text(text: str) -> None:
    """Print plain text without markup interpretation or wrapping."""
    try:
        console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)
    except OSError as e:
        raise OutputError(f"Failed to write output: {e}") from e


def emit_json(value: Any) -> None:
    try:
        typer.echo(render_json(value))
    except OSError as e:
        raise OutputError(f"Failed to write output: {e}") from e


def render_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


# =============================================================================
# Tasks
# =============================================================================


def render_task_list(
    tasks: list[Task],
    include_all: bool = False,
    completion: CompletionFilter | None = None,
) -> str:
    if not tasks:
        scope = "tasks" if include_all else "active tasks"
        if completion is not None:
            return f"No {scope} found with completion status '{completion.value}'."
        return f"No {scope} found."

    lines = [
        f"#{task.id:<6} [{task.status or 'UNKNOWN':<11}] {task.title} (due: {task.due or '-'})"
        for task in tasks
    ]
    lines.append("")
    lines.append(JSON_TIP)
    return "\n".join(lines)


def render_task(task: Task) -> str:
    lines = [f"#{task.id} {task.title}"]
    if task.status is not None:
        lines.append(f"status: {task.status}")
    if task.priority is not None:
        lines.append(f"priority: {task.priority}")
    if task.due is not None:
        lines.append(f"due: {task.due}")
    if task.notes is not None:
        lines.append(f"notes: {task.notes}")
    return "\n".join(lines)


def render_task_mutation(prefix: str, task: Task) -> str:
    """Summary after create/put/patch, e.g. 'Updated (PATCH) task #12: Title'."""
    lines = [f"{prefix} task #{task.id}: {task.title}"]
    if task.status is not None:
        lines.append(f"Status: {task.status}")
    if task.priority is not None:
        lines.append(f"Priority: {task.priority}")
    if task.due is not None:
        lines.append(f"Due: {task.due}")
    return "\n".join(lines)


def delete_output(task_id: int, api_response: Any) -> dict[str, Any]:
    return {"task_id": task_id, "deleted": True, "api_response": api_response}


def render_delete(task_id: int, api_response: Any) -> str:
    lines = [f"Deleted task #{task_id}."]
    if api_response is not None:
        lines.append("API response:")
        lines.append(render_json(api_response))
    return "\n".join(lines)


# =============================================================================
# Events
# =============================================================================


def render_event_list(events: list[Event]) -> str:
    if not events:
        return "No events found."

    lines = [
        f"- {event.display_title} [{event.display_key}] ({event.start} -> {event.end})"
        for event in events
    ]
    lines.append("")
    lines.append(JSON_TIP)
    return "\n".join(lines)


def render_event(event: Event) -> str:
    return "\n".join([
        f"title: {event.display_title}",
        f"key: {event.display_key}",
        f"start: {event.start}",
        f"end: {event.end}",
        "",
        "Raw event JSON:",
        render_json(event.to_api()),
    ])


def event_mutation_output(
    operation: str,
    calendar_id: int,
    event_id: str | None,
    response: Any,
) -> dict[str, Any]:
    output: dict[str, Any] = {"operation": operation, "calendar_id": calendar_id}
    if event_id is not None:
        output["event_id"] = event_id
    output["response"] = response
    return output


def render_event_mutation(output: dict[str, Any]) -> str:
    if output.get("event_id") is not None:
        header = (
            f"Applied {output['operation']} event action for "
            f"{output['calendar_id']}/{output['event_id']}."
        )
    else:
        header = f"Applied {output['operation']} event action for calendar {output['calendar_id']}."
    return f"{header}\n{render_apply_response(output['response'])}"


def render_apply_response(response: Any) -> str:
    """One line per action result; anything else is shown as pretty JSON."""
    results = response.get("results") if isinstance(response, dict) else None
    if not isinstance(results, list):
        return render_json(response)

    if not results:
        return "No action results returned."

    lines = []
    for index, item in enumerate(results, start=1):
        result = json_text(item, ["/result"]) or "UNKNOWN"
        action_type = json_text(
            item, ["/action/action/type", "/action/type", "/type"],
        ) or "UnknownAction"
        event_key = json_text(
            item,
            ["/action/action/eventKey", "/action/eventKey", "/action/action/key", "/action/key"],
        ) or "-"
        lines.append(f"{index}. {result} | {action_type} | {event_key}")

    lines.append("")
    lines.append(MUTATION_TIP)
    return "\n".join(lines)

"""
Reclaim API Records.

Pydantic models mirroring the remote API's JSON. Records keep every field
the API returns (extra="allow") so JSON output can pass them through
without loss; only the fields the CLI reads are declared.
"""

import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

COMPLETED_STATUSES = frozenset({"COMPLETED", "COMPLETE", "DONE", "FINISHED"})
INACTIVE_STATUSES = frozenset({"ARCHIVED", "CANCELLED"})
DEFAULT_POLICY_ID = "00000000-0000-0000-0000-000000000000"


class Priority(str, Enum):
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


class EventCategory(str, Enum):
    WORK = "WORK"
    PERSONAL = "PERSONAL"


class Visibility(str, Enum):
    DEFAULT = "DEFAULT"
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class Transparency(str, Enum):
    OPAQUE = "OPAQUE"
    TRANSPARENT = "TRANSPARENT"


class CompletionFilter(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"


def _status_is_completed(status: Any) -> bool:
    return isinstance(status, str) and status.upper() in COMPLETED_STATUSES


class Task(BaseModel):
    """
    A Reclaim task. Unknown fields are kept as extras.

    Declared fields are strict and never coerced, so to_api() returns the
    record unchanged.
    """

    model_config = ConfigDict(extra="allow", strict=True)

    id: int
    title: str
    status: str | None = None
    due: str | None = None
    priority: str | None = None
    notes: str | None = None
    deleted: bool = False

    @property
    def is_active(self) -> bool:
        """Not deleted, archived or cancelled."""
        return not self.deleted and self.status not in INACTIVE_STATUSES

    @property
    def is_completed(self) -> bool:
        """
        Whether the task is done.

        Checks the status field first, then the completionStatus, completed
        and isComplete fields some API versions return.
        """
        if _status_is_completed(self.status):
            return True

        extra = self.model_extra or {}
        if _status_is_completed(extra.get("completionStatus")):
            return True

        for field in ("completed", "isComplete"):
            value = extra.get(field)
            if isinstance(value, bool):
                return value
        return False

    def to_api(self) -> dict[str, Any]:
        """Return the task exactly as the API sent it."""
        return self.model_dump(mode="json", exclude_unset=True)


class Event(BaseModel):
    """
    A calendar event.

    No fields are declared: events come back in many shapes and are read
    through json_text(), so every field is kept as an extra.
    """

    model_config = ConfigDict(extra="allow")

    def to_api(self) -> dict[str, Any]:
        """Return the event exactly as the API sent it."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    @property
    def display_title(self) -> str:
        return json_text(self.to_api(), ["/title"]) or "<untitled>"

    @property
    def display_key(self) -> str:
        return json_text(self.to_api(), ["/key", "/eventKey"]) or "-"

    @property
    def start(self) -> str:
        return json_text(
            self.to_api(), ["/eventDate/start", "/dateRange/start", "/originalStart"]
        ) or "-"

    @property
    def end(self) -> str:
        return json_text(
            self.to_api(), ["/eventDate/end", "/dateRange/end", "/originalEnd"]
        ) or "-"


class CreateTaskRequest(BaseModel):
    """Body for POST /tasks. Only explicitly supplied fields are sent."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    notes: str | None = None
    priority: Priority | None = None
    due: str | None = None
    time_chunks_required: int | None = None
    min_chunk_size: int | None = None
    max_chunk_size: int | None = None
    event_category: EventCategory | None = None
    always_private: bool | None = None

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EventListQuery(BaseModel):
    """Query parameters for GET /events."""

    calendar_ids: list[int] = Field(default_factory=list)
    all_connected: bool | None = None
    start: str | None = None
    end: str | None = None
    source_details: bool | None = None
    thin: bool | None = None

    def to_params(self) -> list[tuple[str, str]]:
        """Render set values as query pairs; blank start/end are dropped."""
        params = [("calendarIds", str(calendar_id)) for calendar_id in self.calendar_ids]

        if self.all_connected is not None:
            params.append(("allConnected", _bool_param(self.all_connected)))
        for name, value in (("start", self.start), ("end", self.end)):
            if value is not None and value.strip():
                params.append((name, value.strip()))
        if self.source_details is not None:
            params.append(("sourceDetails", _bool_param(self.source_details)))
        if self.thin is not None:
            params.append(("thin", _bool_param(self.thin)))

        return params


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


def json_text(value: Any, pointers: Sequence[str]) -> str | None:
    """
    Return the first non-null value found at any of the JSON pointers.

    Strings are returned as-is, numbers and booleans in JSON spelling,
    and arrays/objects as compact JSON.
    """
    for pointer in pointers:
        candidate = value
        for part in pointer.strip("/").split("/"):
            if isinstance(candidate, dict) and part in candidate:
                candidate = candidate[part]
            elif isinstance(candidate, list) and part.isdigit() and int(part) < len(candidate):
                candidate = candidate[int(part)]
            else:
                candidate = None
                break

        if candidate is None:
            continue
        if isinstance(candidate, str):
            return candidate
        return json.dumps(candidate, separators=(",", ":"))

    return None


def filter_by_completion(tasks: list[Task], completion: CompletionFilter | None) -> list[Task]:
    """Keep open or completed tasks; None keeps everything."""
    if completion is None:
        return list(tasks)
    want_completed = completion is CompletionFilter.COMPLETED
    return [task for task in tasks if task.is_completed == want_completed]

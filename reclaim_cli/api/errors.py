"""
API Error Translation.

Turns non-2xx responses, undecodable success bodies and transport failures
into ReclaimError subclasses that keep the full server detail: request
method and URL, raw response body, request payload and request id.
"""

import json
from typing import Any

import httpx

from reclaim_cli.core.config import get_app_config
from reclaim_cli.core.exceptions import ApiError, ResponseParseError, TransportError

REQUEST_ID_HEADERS = ("x-request-id", "x-correlation-id", "x-amzn-trace-id")
MESSAGE_FIELDS = ("message", "title", "error", "detail")


def _limits() -> tuple[int, int]:
    errors = get_app_config().application.errors
    return errors.body_limit, errors.summary_limit


def truncate_text(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "... <truncated>"


def pretty_json_or_raw(text: str) -> str:
    try:
        return json.dumps(json.loads(text), indent=2)
    except ValueError:
        return text


def request_body_text(request: httpx.Request) -> str | None:
    """Return the sent body as text, or None when there was no body."""
    try:
        content = request.content
    except httpx.RequestNotRead:
        return None

    if not content:
        return None
    try:
        text = content.decode("utf-8").strip()
    except UnicodeDecodeError:
        return f"<{len(content)} bytes binary request body>"
    return text or None


def extract_api_message(payload: Any) -> str | None:
    """
    Find the human message in an API error payload.

    Looks at message, title, error and detail in that order, then at an
    errors field that may be a string, a list of strings or objects, or an
    object mapping field names to messages.
    """
    if not isinstance(payload, dict):
        return None

    for field in MESSAGE_FIELDS:
        candidate = payload.get(field)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()

    message = _extract_errors_message(payload.get("errors"))
    if message and message.strip():
        return message.strip()
    return None


def _message_of(entry: Any) -> str | None:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict) and isinstance(entry.get("message"), str):
        return entry["message"]
    return None


def _extract_errors_message(errors: Any) -> str | None:
    if isinstance(errors, str):
        return errors

    if isinstance(errors, list):
        for item in errors:
            message = _message_of(item)
            if message is not None:
                return message

    if isinstance(errors, dict):
        for field, value in errors.items():
            if isinstance(value, str):
                return f"{field}: {value}"
            if isinstance(value, list):
                for entry in value:
                    message = _message_of(entry)
                    if message is not None:
                        return f"{field}: {message}"

    return None


def extract_request_id(headers: httpx.Headers) -> str | None:
    for name in REQUEST_ID_HEADERS:
        value = headers.get(name, "").strip()
        if value:
            return value
    return None


def hint_for_status(status: int) -> str | None:
    if status in (400, 422):
        return (
            "Check command arguments and inspect the raw response body above "
            "for field-level validation details."
        )
    if status in (401, 403):
        return "Set a valid API key with RECLAIM_API_KEY or --api-key, then retry."
    if status == 404:
        return "Verify the task or event ID exists in your Reclaim account."
    if status == 429:
        return "Rate limited by Reclaim. Wait a few seconds and retry."
    if 500 <= status <= 599:
        return (
            "Reclaim returned a 5xx. This can be an outage OR a rejected payload "
            "surfaced as internal_error. Compare the request payload above with "
            "a known-good request."
        )
    return None


def api_error_from_response(response: httpx.Response) -> ApiError:
    """Build an ApiError that carries every detail of a failed exchange."""
    body_limit, summary_limit = _limits()
    request = response.request
    status = response.status_code
    body = response.text.strip()

    parsed: Any = None
    if body:
        try:
            parsed = json.loads(body)
        except ValueError:
            parsed = None

    message = extract_api_message(parsed)
    if message is None:
        message = truncate_text(body, summary_limit) if body else f"Request failed with HTTP {status}."

    payload = request_body_text(request)
    lines = [
        f"Request: {request.method} {request.url}",
        f"API message: {message}",
    ]

    request_id = extract_request_id(response.headers)
    if request_id:
        lines.append(f"Reclaim request id: {request_id}")

    if body:
        lines.append(f"Raw response body: {truncate_text(body, body_limit)}")
    else:
        lines.append("Raw response body: <empty>")

    if payload is not None:
        lines.append(f"Request payload: {truncate_text(pretty_json_or_raw(payload), body_limit)}")

    return ApiError(
        status,
        "\n".join(lines),
        hint=hint_for_status(status),
        method=request.method,
        url=str(request.url),
        body=response.text,
        request_body=payload,
    )


def parse_error_from_response(response: httpx.Response, error: Exception) -> ResponseParseError:
    body_limit, _ = _limits()
    request = response.request
    body = response.text.strip()

    lines = [
        f"Reclaim API returned a non-JSON success response: {error}",
        f"Request: {request.method} {request.url}",
        f"Raw response body: {truncate_text(pretty_json_or_raw(body), body_limit) if body else '<empty>'}",
    ]
    return ResponseParseError(
        "\n".join(lines),
        hint="Keep the raw response body above when reporting this issue.",
    )


def _request_context(request: httpx.Request | None) -> str:
    if request is None:
        return ""

    _, summary_limit = _limits()
    lines = [f"Request: {request.method} {request.url}"]
    payload = request_body_text(request)
    if payload is not None:
        lines.append(f"Request payload: {truncate_text(pretty_json_or_raw(payload), summary_limit)}")
    return "\n" + "\n".join(lines)


def transport_error_from_exception(error: httpx.HTTPError) -> TransportError:
    """Map an httpx failure to a TransportError with the underlying cause."""
    try:
        request: httpx.Request | None = error.request
    except RuntimeError:
        request = None
    context = _request_context(request)

    if isinstance(error, httpx.TimeoutException):
        return TransportError(
            f"Request to Reclaim timed out before receiving a response. Source error: {error!r}{context}",
            hint="Try again or raise --timeout-secs.",
        )

    if isinstance(error, httpx.ConnectError):
        return TransportError(
            f"Could not connect to the Reclaim API. Source error: {error!r}{context}",
            hint="Check network access and confirm --base-url is correct.",
        )

    return TransportError(
        f"Request failed before receiving a usable API response. Source error: {error!r}{context}",
        hint="Retry. If this keeps happening, verify your network and API key.",
    )

"""
HTTP Client for the Reclaim API.

Provides an async httpx client for the Reclaim REST API. One method per
remote operation; responses are decoded into the records in
reclaim_cli.api.models. Failures are raised as ReclaimError subclasses
(see reclaim_cli.api.errors). Nothing is retried.

The transport can be supplied by the caller, which is how tests replace
the network with httpx.MockTransport.
"""

from typing import Any

import httpx
from pydantic import ValidationError

from reclaim_cli import __version__
from reclaim_cli.api.errors import (
    api_error_from_response,
    parse_error_from_response,
    transport_error_from_exception,
)
from reclaim_cli.api.models import CreateTaskRequest, Event, EventListQuery, Task
from reclaim_cli.core.config import Settings, get_app_config
from reclaim_cli.core.exceptions import (
    ConfigurationError,
    MissingApiKeyError,
    ResponseParseError,
)
from reclaim_cli.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


def normalize_base_url(raw: str) -> str:
    """
    Validate the base URL and make sure its path ends with a slash.

    Raises:
        ConfigurationError: If the URL is not an absolute http(s) URL
    """
    try:
        url = httpx.URL(raw.strip())
    except (httpx.InvalidURL, TypeError) as e:
        raise ConfigurationError(
            f"Invalid base URL: {raw}",
            hint="Use a valid URL, e.g. --base-url https://api.app.reclaim.ai/api",
        ) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(
            f"Invalid base URL: {raw}",
            hint="Use a valid URL, e.g. --base-url https://api.app.reclaim.ai/api",
        )

    text = str(url.copy_with(query=None, fragment=None))
    return text if text.endswith("/") else text + "/"


class ReclaimClient:
    """
    HTTP client for the Reclaim API.

    Features:
    - Bearer authentication from RECLAIM_API_KEY / --api-key
    - Base URL and timeout from settings
    - Structured logging of requests/responses
    - Full error context (status, request, raw body, payload)

    Usage:
        async with ReclaimClient.from_settings(settings) as client:
            tasks = await client.list_tasks()
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: Reclaim API key. Blank values count as missing.
            base_url: API base URL. If None, reads from application.yaml.
            timeout: Request timeout in seconds. If None, reads from application.yaml.
            transport: Optional httpx transport (tests use httpx.MockTransport).

        Raises:
            MissingApiKeyError: If no usable API key was given
            ConfigurationError: If the base URL is invalid
        """
        api_key = (api_key or "").strip()
        if not api_key:
            raise MissingApiKeyError()

        api_config = get_app_config().application.api
        self.base_url = normalize_base_url(base_url or api_config.base_url)
        self.timeout = float(timeout if timeout is not None else api_config.timeout_secs)
        self.user_agent = f"{api_config.user_agent}/{__version__}"
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ReclaimClient":
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_secs,
            transport=transport,
        )

    async def __aenter__(self) -> "ReclaimClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                    "User-Agent": self.user_agent,
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send one request and return the successful response.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: Path relative to the base URL (e.g., tasks/123)
            **kwargs: Additional arguments for httpx

        Raises:
            TransportError: If no response was received
            ApiError: If the response status is not 2xx
        """
        client = await self._get_client()
        path = path.lstrip("/")

        log_with_source(logger, "api", "debug", "API request", method=method, path=path)

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log_with_source(
                logger, "api", "info", "API request failed",
                method=method, path=path, error=str(e),
            )
            raise transport_error_from_exception(e) from e

        log_with_source(
            logger, "api", "debug", "API response",
            method=method, path=path, status_code=response.status_code,
        )

        if not response.is_success:
            raise api_error_from_response(response)
        return response

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self.request(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise parse_error_from_response(response, e) from e

    async def _request_json_or_none(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self.request(method, path, **kwargs)
        if not response.text.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise parse_error_from_response(response, e) from e

    def _decode(self, model: type, data: Any, what: str) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise self._shape_error(what, e, data) from e

    @staticmethod
    def _shape_error(what: str, error: Exception, data: Any) -> ResponseParseError:
        return ResponseParseError(
            f"Reclaim API returned an unexpected {what} shape: {error}\n"
            f"Raw response body: {str(data)[:512]}",
            hint="Keep the raw response body above when reporting this issue.",
        )

    @staticmethod
    def _notification_params(notification_key: str | None) -> dict[str, str]:
        key = (notification_key or "").strip()
        return {"notificationKey": key} if key else {}

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def list_tasks(self, include_all: bool = False) -> list[Task]:
        """List tasks. Archived, cancelled and deleted tasks are dropped unless include_all."""
        data = await self._request_json("GET", "tasks")
        if not isinstance(data, list):
            raise self._shape_error("task list", ValueError("expected a JSON array"), data)

        tasks = [self._decode(Task, item, "task") for item in data]
        if include_all:
            return tasks
        return [task for task in tasks if task.is_active]

    async def get_task(self, task_id: int) -> Task:
        data = await self._request_json("GET", f"tasks/{task_id}")
        return self._decode(Task, data, "task")

    async def create_task(self, request: CreateTaskRequest) -> Task:
        data = await self._request_json("POST", "tasks", json=request.to_api())
        return self._decode(Task, data, "task")

    async def put_task(
        self,
        task_id: int,
        payload: dict[str, Any],
        notification_key: str | None = None,
    ) -> Task:
        data = await self._request_json(
            "PUT",
            f"tasks/{task_id}",
            json=payload,
            params=self._notification_params(notification_key),
        )
        return self._decode(Task, data, "task")

    async def patch_task(
        self,
        task_id: int,
        payload: dict[str, Any],
        notification_key: str | None = None,
    ) -> Task:
        data = await self._request_json(
            "PATCH",
            f"tasks/{task_id}",
            json=payload,
            params=self._notification_params(notification_key),
        )
        return self._decode(Task, data, "task")

    async def delete_task(self, task_id: int, notification_key: str | None = None) -> Any:
        """Delete a task. Returns the decoded response body, or None when empty."""
        return await self._request_json_or_none(
            "DELETE",
            f"tasks/{task_id}",
            params=self._notification_params(notification_key),
        )

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    async def list_events(self, query: EventListQuery | None = None) -> list[Event]:
        query = query or EventListQuery()
        data = await self._request_json("GET", "events", params=query.to_params())
        if not isinstance(data, list):
            raise self._shape_error("event list", ValueError("expected a JSON array"), data)
        return [self._decode(Event, item, "event") for item in data]

    async def get_event(
        self,
        calendar_id: int,
        event_id: str,
        source_details: bool | None = None,
        thin: bool | None = None,
    ) -> Event:
        query = EventListQuery(source_details=source_details, thin=thin)
        data = await self._request_json(
            "GET", f"events/{calendar_id}/{event_id}", params=query.to_params(),
        )
        return self._decode(Event, data, "event")

    async def apply_schedule_actions(self, payload: dict[str, Any]) -> Any:
        """POST an actionsTaken batch. Returns the raw decoded response."""
        return await self._request_json(
            "POST", "schedule-actions/apply-actions", json=payload,
        )

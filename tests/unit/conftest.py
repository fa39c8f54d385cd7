"""
Unit Test Fixtures.

Fixtures for unit tests - the network is always replaced.
Unit tests never reach the real Reclaim API: requests go to an
httpx.MockTransport that records what it was sent.
"""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

from reclaim_cli.cli.main import app
from reclaim_cli.cli.state import CliState

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport:
    """
    Mock transport that keeps every request it receives.

    Usage:
        api = RecordingTransport(lambda request: httpx.Response(200, json=[]))
        client = ReclaimClient("key", transport=api.transport)
        ...
        assert api.requests[0].url.path == "/api/tasks"
    """

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []
        self._handler = handler
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def json_body(self, index: int = 0) -> Any:
        return json.loads(self.requests[index].content)


def sample_task(task_id: int = 1, title: str = "Plan sprint", **fields: Any) -> dict[str, Any]:
    task: dict[str, Any] = {
        "id": task_id,
        "title": title,
        "status": "NEW",
        "due": "2026-02-23T17:00:00Z",
        "priority": "P3",
    }
    task.update(fields)
    return task


@pytest.fixture
def make_task() -> Callable[..., dict[str, Any]]:
    """Factory for task JSON as the API returns it."""
    return sample_task


@pytest.fixture
def api_key(monkeypatch: pytest.MonkeyPatch) -> str:
    """Provide a usable API key through the environment."""
    monkeypatch.setenv("RECLAIM_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def mock_api() -> Callable[[Handler], RecordingTransport]:
    """
    Factory for recording transports.

    Usage:
        def test_list(mock_api):
            api = mock_api(lambda request: httpx.Response(200, json=[]))
    """
    return RecordingTransport


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def invoke(cli_runner: CliRunner) -> Callable[..., Any]:
    """
    Run the CLI with an optional recording transport.

    Usage:
        result = invoke(["get", "1"], api)
    """

    def _invoke(args: list[str], api: RecordingTransport | None = None) -> Any:
        state = CliState(transport=api.transport if api is not None else None)
        return cli_runner.invoke(app, args, obj=state)

    return _invoke

"""Unit tests for task commands."""

import json

import httpx
import pytest

from reclaim_cli import __version__


def _json_response(status: int, body: str) -> httpx.Response:
    return httpx.Response(
        status,
        content=body.encode(),
        headers={"Content-Type": "application/json"},
    )


class TestMainApp:
    """Tests for main app options."""

    def test_help_lists_commands(self, invoke) -> None:
        """Test main help names the top-level commands."""
        result = invoke(["--help"])
        assert result.exit_code == 0
        for command in ("list", "get", "create", "put", "patch", "delete", "events", "dashboard"):
            assert command in result.stdout

    def test_version(self, invoke) -> None:
        """Test --version prints the package version."""
        result = invoke(["--version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == f"reclaim {__version__}"

    def test_unknown_command_is_usage_error(self, invoke) -> None:
        """Test unknown subcommands exit with code 2."""
        result = invoke(["frobnicate"])
        assert result.exit_code == 2

    def test_debug_flag_is_accepted(self, invoke, api_key, mock_api) -> None:
        """Test -d is accepted before the subcommand."""
        api = mock_api(lambda request: httpx.Response(200, json=[]))
        result = invoke(["-d", "list"], api)
        assert result.exit_code == 0

    def test_invalid_base_url_is_config_error(self, invoke, api_key, mock_api) -> None:
        """Test a malformed --base-url fails before any request."""
        api = mock_api(lambda request: httpx.Response(200, json=[]))
        result = invoke(["--base-url", "not a url", "list"], api)
        assert result.exit_code == 3
        assert "Invalid base URL" in result.output
        assert api.requests == []

    def test_base_url_option_is_used(self, invoke, api_key, mock_api) -> None:
        """Test requests are joined onto --base-url."""
        api = mock_api(lambda request: httpx.Response(200, json=[]))
        result = invoke(["--base-url", "http://localhost:9000/v2", "list"], api)
        assert result.exit_code == 0
        assert str(api.requests[0].url) == "http://localhost:9000/v2/tasks"

    def test_api_key_option_sets_bearer_header(self, invoke, mock_api) -> None:
        """Test --api-key works without the environment variable."""
        api = mock_api(lambda request: httpx.Response(200, json=[]))
        result = invoke(["--api-key", "from-flag", "list"], api)
        assert result.exit_code == 0
        assert api.requests[0].headers["Authorization"] == "Bearer from-flag"


class TestGlobalOptionsAfterCommand:
    """Tests for global options given after the subcommand."""

    def test_format_after_list(self, invoke, api_key, mock_api, make_task) -> None:
        """Test `list --all --format json` prints JSON."""
        records = [make_task(1, "Plan sprint")]
        api = mock_api(lambda request: httpx.Response(200, json=records))

        result = invoke(["list", "--all", "--format", "json"], api)

        assert result.exit_code == 0
        assert json.loads(result.stdout) == records

    def test_connection_options_after_nested_command(self, invoke, mock_api) -> None:
        """Test --api-key, --base-url and --timeout-secs after `events list`."""
        api = mock_api(lambda request: httpx.Response(200, json=[]))

        result = invoke([
            "events", "list",
            "--api-key", "from-flag",
            "--base-url", "http://localhost:9000/v2",
            "--timeout-secs", "5",
        ], api)

        assert result.exit_code == 0
        request = api.requests[0]
        assert request.headers["Authorization"] == "Bearer from-flag"
        assert request.url.host == "localhost"
        assert request.url.path == "/v2/events"

    def test_command_level_value_wins(self, invoke, api_key, mock_api, make_task) -> None:
        """Test a value after the subcommand overrides one before it."""
        api = mock_api(lambda request: httpx.Response(200, json=make_task(3)))

        result = invoke(["--format", "text", "get", "3", "--format", "json"], api)

        assert result.exit_code == 0
        assert json.loads(result.stdout)["id"] == 3

    def test_timeout_minimum_enforced(self, invoke, api_key, mock_api) -> None:
        api = mock_api(lambda request: httpx.Response(200, json=[]))
        result = invoke(["list", "--timeout-secs", "0"], api)
        assert result.exit_code == 2
        assert api.requests == []


class TestMissingCredentials:
    """Tests for commands run without an API key."""

    @pytest.mark.parametrize("args", [
        ["list"],
        ["get", "1"],
        ["create", "--title", "Plan sprint"],
        ["put", "1", "--json", '{"title":"Plan sprint"}'],
        ["put", "1", "--set", "priority=P2"],
        ["patch", "1", "--set", "priority=P2"],
        ["delete", "1"],
        ["events", "list"],
        ["events", "get", "7", "abc123"],
        [
            "events", "create", "7", "--title", "Sync",
            "--start", "2026-02-21T18:30:00Z", "--end", "2026-02-21T19:00:00Z",
        ],
        ["events", "update", "7", "abc123", "--title", "Team sync"],
        ["events", "delete", "7", "abc123"],
        ["events", "apply", "--json", '{"actionsTaken":[{"type":"CancelEventAction"}]}'],
        ["dashboard"],
    ])
    def test_missing_key_sends_no_request(self, invoke, mock_api, args) -> None:
        """Test a missing key exits 3 with a hint and no network traffic."""
        api = mock_api(lambda request: httpx.Response(200, json=[]))
        result = invoke(args, api)
        assert result.exit_code == 3
        assert "Error: Missing Reclaim API key." in result.output
        assert "Hint: Set RECLAIM_API_KEY or pass --api-key" in result.output
        assert api.requests == []

    def test_blank_key_counts_as_missing(self, invoke, mock_api, monkeypatch) -> None:
        """Test a whitespace-only key is rejected."""
        monkeypatch.setenv("RECLAIM_API_KEY", "   ")
        api = mock_api(lambda request: httpx.Response(200, json=[]))
        result = invoke(["list"], api)
        assert result.exit_code == 3
        assert api.requests == []


class TestListCommand:
    """Tests for the list command."""

    def test_json_output_round_trips_api_records(self, invoke, api_key, mock_api, make_task) -> None:
        """Test --format json prints the records exactly as returned."""
        records = [
            make_task(1, "Plan sprint", eventCategory="WORK", snoozeUntil=None),
            make_task(2, "Write report", notes="draft"),
        ]
        api = mock_api(lambda request: httpx.Response(200, json=records))

        result = invoke(["--format", "json", "list"], api)

        assert result.exit_code == 0
        assert json.loads(result.stdout) == records

    def test_text_output_lines(self, invoke, api_key, mock_api, make_task) -> None:
        """Test one aligned line per task plus a tip."""
        api = mock_api(lambda request: httpx.Response(200, json=[make_task(7, "Plan sprint")]))

        result = invoke(["list"], api)

        assert result.exit_code == 0
        expected = f"#{7:<6} [{'NEW':<11}] Plan sprint (due: 2026-02-23T17:00:00Z)"
        assert expected in result.stdout
        assert "Tip: use --format json" in result.stdout

    def test_inactive_tasks_hidden_by_default(self, invoke, api_key, mock_api, make_task) -> None:
        """Test archived, cancelled and deleted tasks are dropped."""
        records = [
            make_task(1, "Active"),
            make_task(2, "Archived", status="ARCHIVED"),
            make_task(3, "Cancelled", status="CANCELLED"),
            make_task(4, "Deleted", deleted=True),
        ]
        api = mock_api(lambda request: httpx.Response(200, json=records))

        result = invoke(["--format", "json", "list"], api)

        assert [task["id"] for task in json.loads(result.stdout)] == [1]

    def test_all_flag_keeps_inactive_tasks(self, invoke, api_key, mock_api, make_task) -> None:
        """Test --all returns every task."""
        records = [make_task(1, "Active"), make_task(2, "Archived", status="ARCHIVED")]
        api = mock_api(lambda request: httpx.Response(200, json=records))

        result = invoke(["--format", "json", "list", "--all"], api)

        assert [task["id"] for task in json.loads(result.stdout)] == [1, 2]

    def test_completion_filter(self, invoke, api_key, mock_api, make_task) -> None:
        """Test --filter completed keeps only finished tasks."""
        records = [
            make_task(1, "Open"),
            make_task(2, "Done", status="COMPLETE"),
            make_task(3, "Flagged done", completed=True),
        ]
        api = mock_api(lambda request: httpx.Response(200, json=records))

        result = invoke(["--format", "json", "list", "--filter", "completed"], api)

        assert [task["id"] for task in json.loads(result.stdout)] == [2, 3]

    def test_empty_list_message(self, invoke, api_key, mock_api) -> None:
        """Test the empty message names the scope."""
        api = mock_api(lambda request: httpx.Response(200, json=[]))

        result = invoke(["list"], api)

        assert result.exit_code == 0
        assert "No active tasks found." in result.stdout

    def test_empty_filtered_list_message(self, invoke, api_key, mock_api) -> None:
        """Test the empty message names the completion filter."""
        api = mock_api(lambda request: httpx.Response(200, json=[]))

        result = invoke(["list", "--all", "--filter", "open"], api)

        assert "No tasks found with completion status 'open'." in result.stdout

    def test_ls_alias(self, invoke, api_key, mock_api) -> None:
        """Test ls behaves like list."""
        api = mock_api(lambda request: httpx.Response(200, json=[]))
        result = invoke(["ls"], api)
        assert result.exit_code == 0
        assert api.requests[0].method == "GET"
        assert api.requests[0].url.path == "/api/tasks"

    def test_non_json_success_body_is_parse_error(self, invoke, api_key, mock_api) -> None:
        """Test an HTML 200 response exits 6 with the raw body."""
        api = mock_api(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

        result = invoke(["list"], api)

        assert result.exit_code == 6
        assert "<html>maintenance</html>" in result.output

    def test_connect_failure_is_transport_error(self, invoke, api_key, mock_api) -> None:
        """Test a connection failure exits 4 with a hint."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = invoke(["list"], mock_api(refuse))

        assert result.exit_code == 4
        assert "Could not connect to the Reclaim API" in result.output
        assert "Hint:" in result.output


class TestGetCommand:
    """Tests for the get command."""

    def test_text_output(self, invoke, api_key, mock_api, make_task) -> None:
        """Test single-task text rendering."""
        api = mock_api(lambda request: httpx.Response(200, json=make_task(42, notes="bring slides")))

        result = invoke(["get", "42"], api)

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            "#42 Plan sprint",
            "status: NEW",
            "priority: P3",
            "due: 2026-02-23T17:00:00Z",
            "notes: bring slides",
        ]

    def test_not_found_shows_full_context(self, invoke, api_key, mock_api) -> None:
        """Test a 404 keeps status, method, path and raw body."""
        raw = '{"message":"Task not found","code":"NOT_FOUND"}'
        api = mock_api(lambda request: _json_response(404, raw))

        result = invoke(["get", "999"], api)

        assert result.exit_code == 5
        assert "HTTP 404" in result.output
        assert "Request: GET" in result.output
        assert "/tasks/999" in result.output
        assert f"Raw response body: {raw}" in result.output
        assert "API message: Task not found" in result.output
        assert "Hint: Verify the task or event ID exists" in result.output

    def test_show_alias(self, invoke, api_key, mock_api, make_task) -> None:
        """Test show behaves like get."""
        api = mock_api(lambda request: httpx.Response(200, json=make_task(3)))
        result = invoke(["show", "3"], api)
        assert result.exit_code == 0
        assert api.requests[0].url.path == "/api/tasks/3"

    def test_non_numeric_id_is_usage_error(self, invoke, api_key, mock_api) -> None:
        """Test a non-integer task ID is rejected locally."""
        api = mock_api(lambda request: httpx.Response(200, json={}))
        result = invoke(["get", "abc"], api)
        assert result.exit_code == 2
        assert api.requests == []


class TestCreateCommand:
    """Tests for the create command."""

    def test_minimal_body_contains_only_title(self, invoke, api_key, mock_api, make_task) -> None:
        """Test create --title sends exactly the title."""
        api = mock_api(lambda request: httpx.Response(200, json=make_task(1)))

        result = invoke(["create", "--title", "Plan sprint"], api)

        assert result.exit_code == 0
        assert api.requests[0].method == "POST"
        assert api.requests[0].url.path == "/api/tasks"
        assert api.json_body() == {"title": "Plan sprint"}
        assert "Created task #1: Plan sprint" in result.stdout

    def test_explicit_flags_are_sent(self, invoke, api_key, mock_api, make_task) -> None:
        """Test each passed flag appears in the body under its API name."""
        api = mock_api(lambda request: httpx.Response(200, json=make_task(1)))

        result = invoke([
            "create", "--title", "Plan sprint",
            "--notes", "agenda",
            "--priority", "P2",
            "--due", "2026-02-19T15:00:00Z",
            "--time-chunks-required", "4",
            "--event-category", "PERSONAL",
            "--always-private", "false",
        ], api)

        assert result.exit_code == 0
        assert api.json_body() == {
            "title": "Plan sprint",
            "notes": "agenda",
            "priority": "P2",
            "due": "2026-02-19T15:00:00Z",
            "timeChunksRequired": 4,
            "minChunkSize": 1,
            "maxChunkSize": 4,
            "eventCategory": "PERSONAL",
            "alwaysPrivate": False,
        }

    def test_chunk_size_without_total_is_rejected(self, invoke, api_key, mock_api) -> None:
        """Test --max-chunk-size needs --time-chunks-required."""
        api = mock_api(lambda request: httpx.Response(200, json={}))

        result = invoke(["create", "--title", "x", "--max-chunk-size", "2"], api)

        assert result.exit_code == 2
        assert "require --time-chunks-required" in result.output
        assert api.requests == []

    def test_blank_title_is_rejected(self, invoke, api_key, mock_api) -> None:
        """Test an empty title never reaches the API."""
        api = mock_api(lambda request: httpx.Response(200, json={}))
        result = invoke(["create", "--title", "  "], api)
        assert result.exit_code == 2
        assert api.requests == []

    def test_json_output_is_api_record(self, invoke, api_key, mock_api, make_task) -> None:
        """Test --format json prints the created task as returned."""
        record = make_task(9, alwaysPrivate=True)
        api = mock_api(lambda request: httpx.Response(200, json=record))

        result = invoke(["--format", "json", "create", "--title", "Plan sprint"], api)

        assert json.loads(result.stdout) == record


class TestPutAndPatchCommands:
    """Tests for put and patch."""

    @pytest.mark.parametrize("command", ["put", "patch"])
    def test_json_and_set_together_is_usage_error(self, invoke, api_key, mock_api, command) -> None:
        """Test the two body flags are mutually exclusive and nothing is sent."""
        api = mock_api(lambda request: httpx.Response(200, json={}))

        result = invoke([command, "1", "--json", '{"priority":"P4"}', "--set", "title=x"], api)

        assert result.exit_code == 2
        assert "--json and --set cannot be used together." in result.output
        assert api.requests == []

    def test_malformed_set_names_token(self, invoke, api_key, mock_api) -> None:
        """Test a --set value without '=' is reported by name."""
        api = mock_api(lambda request: httpx.Response(200, json={}))

        result = invoke(["patch", "1", "--set", "priority"], api)

        assert result.exit_code == 2
        assert "Invalid --set value 'priority'. Expected KEY=VALUE." in result.output
        assert api.requests == []

    def test_invalid_json_is_usage_error(self, invoke, api_key, mock_api) -> None:
        """Test --json must be an object literal."""
        api = mock_api(lambda request: httpx.Response(200, json={}))
        result = invoke(["patch", "1", "--json", "[1, 2]"], api)
        assert result.exit_code == 2
        assert "expected a JSON object" in result.output
        assert api.requests == []

    def test_patch_sends_parsed_values(self, invoke, api_key, mock_api, make_task) -> None:
        """Test --set values are parsed as JSON literals with string fallback."""
        api = mock_api(lambda request: httpx.Response(200, json=make_task(5, priority="P4")))

        result = invoke([
            "patch", "5",
            "--set", "priority=P4",
            "--set", "timeChunksRequired=6",
            "--set", "alwaysPrivate=true",
            "--notification-key", "abc",
        ], api)

        assert result.exit_code == 0
        request = api.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/api/tasks/5"
        assert request.url.params["notificationKey"] == "abc"
        assert api.json_body() == {"priority": "P4", "timeChunksRequired": 6, "alwaysPrivate": True}
        assert "Updated (PATCH) task #5: Plan sprint" in result.stdout

    def test_patch_without_fields_is_rejected(self, invoke, api_key, mock_api) -> None:
        """Test PATCH needs at least one field."""
        api = mock_api(lambda request: httpx.Response(200, json={}))
        result = invoke(["patch", "5", "--json", "{}"], api)
        assert result.exit_code == 2
        assert api.requests == []

    def test_put_with_json_sends_body_as_given(self, invoke, api_key, mock_api, make_task) -> None:
        """Test put --json issues a single PUT."""
        api = mock_api(lambda request: httpx.Response(200, json=make_task(5)))

        result = invoke(["put", "5", "--json", '{"title":"Plan sprint","priority":"P1"}'], api)

        assert result.exit_code == 0
        assert [request.method for request in api.requests] == ["PUT"]
        assert api.json_body() == {"title": "Plan sprint", "priority": "P1"}

    def test_put_with_set_merges_over_current_task(self, invoke, api_key, mock_api, make_task) -> None:
        """Test put --set fetches the task and applies overrides on top."""
        current = make_task(5, notes="keep me")

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json=current)
            return httpx.Response(200, json={**current, "priority": "P1"})

        api = mock_api(handler)

        result = invoke(["put", "5", "--set", "priority=P1"], api)

        assert result.exit_code == 0
        assert [request.method for request in api.requests] == ["GET", "PUT"]
        assert api.json_body(1) == {**current, "priority": "P1"}
        assert "Updated (PUT) task #5" in result.stdout

    def test_put_without_body_is_rejected(self, invoke, api_key, mock_api) -> None:
        """Test PUT requires --json or --set."""
        api = mock_api(lambda request: httpx.Response(200, json={}))

        result = invoke(["put", "5"], api)

        assert result.exit_code == 2
        assert "PUT requires update data" in result.output
        assert api.requests == []

    def test_server_error_keeps_request_payload(self, invoke, api_key, mock_api) -> None:
        """Test a 500 reply shows the payload that was sent."""
        api = mock_api(lambda request: _json_response(500, '{"error":"internal_error"}'))

        result = invoke(["patch", "5", "--set", "priority=P9"], api)

        assert result.exit_code == 5
        assert "HTTP 500" in result.output
        assert "Request: PATCH" in result.output
        assert "Request payload:" in result.output
        assert '"priority": "P9"' in result.output


class TestDeleteCommand:
    """Tests for the delete command."""

    def test_empty_response_text(self, invoke, api_key, mock_api) -> None:
        """Test a 204 prints the confirmation only."""
        api = mock_api(lambda request: httpx.Response(204))

        result = invoke(["delete", "5"], api)

        assert result.exit_code == 0
        assert result.stdout.strip() == "Deleted task #5."
        assert api.requests[0].method == "DELETE"

    def test_empty_response_json(self, invoke, api_key, mock_api) -> None:
        """Test JSON delete output wraps the API response."""
        api = mock_api(lambda request: httpx.Response(204))

        result = invoke(["--format", "json", "delete", "5"], api)

        assert json.loads(result.stdout) == {"task_id": 5, "deleted": True, "api_response": None}

    def test_response_body_is_shown(self, invoke, api_key, mock_api) -> None:
        """Test a non-empty reply is printed after the confirmation."""
        api = mock_api(lambda request: httpx.Response(200, json={"ok": True}))

        result = invoke(["delete", "5"], api)

        assert "Deleted task #5." in result.stdout
        assert "API response:" in result.stdout
        assert '"ok": true' in result.stdout

    @pytest.mark.parametrize("alias", ["del", "rm", "remove"])
    def test_aliases(self, invoke, api_key, mock_api, alias) -> None:
        """Test delete aliases send the same request."""
        api = mock_api(lambda request: httpx.Response(204))

        result = invoke([alias, "8", "--notification-key", "n1"], api)

        assert result.exit_code == 0
        assert api.requests[0].url.path == "/api/tasks/8"
        assert api.requests[0].url.params["notificationKey"] == "n1"

    def test_blank_notification_key_is_ignored(self, invoke, api_key, mock_api) -> None:
        """Test a blank notification key adds no query parameter."""
        api = mock_api(lambda request: httpx.Response(204))
        invoke(["delete", "8", "--notification-key", " "], api)
        assert "notificationKey" not in api.requests[0].url.params

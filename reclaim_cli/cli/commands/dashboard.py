"""
Dashboard Command.

Opens the full-screen task dashboard (reclaim_cli.tui).
"""

import asyncio
from typing import Optional

import typer

from reclaim_cli.cli.errors import handle_errors
from reclaim_cli.cli.state import (
    API_KEY_OPTION,
    BASE_URL_OPTION,
    FORMAT_OPTION,
    TIMEOUT_OPTION,
    CliState,
    OutputFormat,
    get_state,
)
from reclaim_cli.core.exceptions import InvalidInputError
from reclaim_cli.tui.dashboard import run_dashboard


def register(app: typer.Typer) -> None:
    app.command("dashboard")(dashboard)


def dashboard(
    ctx: typer.Context,
    include_all: bool = typer.Option(
        False, "--all", "-a", help="Include archived, cancelled and deleted tasks",
    ),
    output_format: Optional[OutputFormat] = FORMAT_OPTION,
    api_key: Optional[str] = API_KEY_OPTION,
    base_url: Optional[str] = BASE_URL_OPTION,
    timeout_secs: Optional[int] = TIMEOUT_OPTION,
) -> None:
    """
    Open the interactive task dashboard.

    Press ? inside the dashboard for key bindings.
    """
    state = get_state(ctx, output_format, api_key, base_url, timeout_secs)
    with handle_errors():
        if state.wants_json:
            raise InvalidInputError(
                "The dashboard is interactive and does not support --format json.",
                hint="Use `reclaim --format json list` for machine-readable output.",
            )
        asyncio.run(_dashboard(state, include_all))


async def _dashboard(state: CliState, include_all: bool) -> None:
    client = state.client()
    try:
        await run_dashboard(client, include_all)
    finally:
        await client.close()

"""
Reclaim CLI.

Command-line client for the Reclaim.ai REST API.
Built with Typer for commands and Rich for output.

Usage:
    reclaim --help                                  # Show help

    # Tasks
    reclaim list                                    # Active tasks
    reclaim list --all --filter completed           # Include archived/deleted, done only
    reclaim get 42                                  # One task
    reclaim create --title "Plan sprint" --due 2026-02-19T15:00:00Z
    reclaim patch 42 --set priority=P2
    reclaim put 42 --json '{"title":"Plan sprint","priority":"P2"}'
    reclaim delete 42

    # Events
    reclaim events list --calendar-id 7 --start 2026-02-21T00:00:00Z
    reclaim events get 7 abc123
    reclaim events create 7 --title "Sync" --start ... --end ...
    reclaim events apply --json '{"actionsTaken":[...]}'

    # Interactive
    reclaim dashboard                               # Full-screen task dashboard

Options:
    --format text|json   Output format (default text)
    --verbose, -v        INFO level logging on stderr
    --debug, -d          DEBUG level logging on stderr

--format, --api-key, --base-url and --timeout-secs may also follow the
subcommand: reclaim list --all --format json
"""

from typing import Optional

import typer

from reclaim_cli import __version__
from reclaim_cli.cli.commands import dashboard, events_app, tasks
from reclaim_cli.cli.state import CliState, OutputFormat
from reclaim_cli.core.logging import setup_logging

app = typer.Typer(
    name="reclaim",
    help="Reclaim.ai CLI - tasks, calendar events and an interactive dashboard.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register commands
tasks.register(app)
dashboard.register(app)
app.add_typer(events_app, name="events")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"reclaim {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    output_format: OutputFormat = typer.Option(
        OutputFormat.TEXT,
        "--format",
        case_sensitive=False,
        help="Output format",
    ),
    api_key: Optional[str] = typer.Option(
        None,
        "--api-key",
        help="Reclaim API key (default: RECLAIM_API_KEY)",
        show_default=False,
    ),
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        help="API base URL (default: RECLAIM_BASE_URL or https://api.app.reclaim.ai/api)",
    ),
    timeout_secs: Optional[int] = typer.Option(
        None,
        "--timeout-secs",
        min=1,
        help="Request timeout in seconds (default: RECLAIM_TIMEOUT_SECS or 15)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Reclaim.ai CLI.

    Reads the API key from RECLAIM_API_KEY (or --api-key). Logs go to
    stderr; stdout carries only command output.
    """
    if debug:
        setup_logging(level="DEBUG")
    elif verbose:
        setup_logging(level="INFO")
    else:
        setup_logging()

    # Tests pre-populate ctx.obj with a CliState carrying a mock transport
    state = ctx.obj if isinstance(ctx.obj, CliState) else CliState()
    state.output_format = output_format
    state.api_key = api_key
    state.base_url = base_url
    state.timeout_secs = timeout_secs
    ctx.obj = state


def run() -> None:
    """Console script entry point."""
    app(prog_name="reclaim")


if __name__ == "__main__":
    run()

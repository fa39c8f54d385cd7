"""
Invocation State.

The parsed global options of one invocation, stored on the Typer context
(ctx.obj) by the root callback and read by every command.
"""

from dataclasses import dataclass
from enum import Enum

import httpx
import typer

from reclaim_cli.api.client import ReclaimClient
from reclaim_cli.core.config import Settings, load_settings


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


@dataclass
class CliState:
    """Global options plus an optional transport override (used by tests)."""

    output_format: OutputFormat = OutputFormat.TEXT
    api_key: str | None = None
    base_url: str | None = None
    timeout_secs: int | None = None
    transport: httpx.AsyncBaseTransport | None = None

    @property
    def wants_json(self) -> bool:
        return self.output_format is OutputFormat.JSON

    def settings(self) -> Settings:
        return load_settings(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout_secs=self.timeout_secs,
        )

    def client(self) -> ReclaimClient:
        """
        Build the API client.

        Raises:
            MissingApiKeyError: Before any request, when no key is configured
        """
        return ReclaimClient.from_settings(self.settings(), transport=self.transport)


GLOBAL_PANEL = "Global options"

# Same options as the root callback, accepted after the subcommand too.
# A value given here wins over one given before the subcommand.
FORMAT_OPTION = typer.Option(
    None,
    "--format",
    case_sensitive=False,
    help="Output format",
    show_default=False,
    rich_help_panel=GLOBAL_PANEL,
)
API_KEY_OPTION = typer.Option(
    None,
    "--api-key",
    help="Reclaim API key (default: RECLAIM_API_KEY)",
    show_default=False,
    rich_help_panel=GLOBAL_PANEL,
)
BASE_URL_OPTION = typer.Option(
    None,
    "--base-url",
    help="API base URL (default: RECLAIM_BASE_URL)",
    show_default=False,
    rich_help_panel=GLOBAL_PANEL,
)
TIMEOUT_OPTION = typer.Option(
    None,
    "--timeout-secs",
    min=1,
    help="Request timeout in seconds (default: RECLAIM_TIMEOUT_SECS or 15)",
    show_default=False,
    rich_help_panel=GLOBAL_PANEL,
)


def get_state(
    ctx: typer.Context,
    output_format: OutputFormat | None = None,
    api_key: str | None = None,
    base_url: str | None = None,
    timeout_secs: int | None = None,
) -> CliState:
    """
    Return the CliState of the root context.

    Global options repeated after the subcommand override the values the
    root callback stored.
    """
    state = ctx.find_root().obj
    if not isinstance(state, CliState):
        state = CliState()
        ctx.find_root().obj = state

    if output_format is not None:
        state.output_format = output_format
    if api_key is not None:
        state.api_key = api_key
    if base_url is not None:
        state.base_url = base_url
    if timeout_secs is not None:
        state.timeout_secs = timeout_secs
    return state

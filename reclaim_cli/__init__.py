"""
reclaim-cli.

Command-line client for the Reclaim.ai task and calendar API.

- api/: HTTP client, records and error translation (httpx + pydantic)
- cli/: Typer commands, payload builders and output formatting (Typer + Rich)
- core/: Configuration, logging and exceptions
- tui/: Interactive task dashboard (Textual)
"""

__version__ = "0.4.0"

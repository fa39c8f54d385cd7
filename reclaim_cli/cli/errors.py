"""
CLI Error Reporting.

Every command body runs inside handle_errors(): a ReclaimError is printed
as "Error: ..." / "Hint: ..." on stderr and ends the process with the
error's category exit code. Other exceptions propagate.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.text import Text

from reclaim_cli.core.exceptions import ReclaimError
from reclaim_cli.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

err_console = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)


def report_error(error: ReclaimError) -> None:
    err_console.print(Text.assemble(("Error: ", "bold red"), error.message))
    if error.hint:
        err_console.print(Text.assemble(("Hint: ", "yellow"), error.hint))


@contextmanager
def handle_errors() -> Iterator[None]:
    try:
        yield
    except ReclaimError as e:
        log_with_source(
            logger, "cli", "debug", "Command failed",
            code=e.code, exit_code=e.exit_code,
        )
        report_error(e)
        raise typer.Exit(e.exit_code) from e

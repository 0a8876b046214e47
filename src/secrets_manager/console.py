"""Shared console and logging setup for the CLI."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

no_color = os.environ.get("NO_COLOR", "").lower() in ("1", "true", "yes")

# Data goes to stdout through typer.echo; diagnostics go here.
err_console = Console(stderr=True, highlight=False, no_color=no_color)


def error(msg: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]✗[/red] {escape(msg)}", markup=True, soft_wrap=True)


def setup_logging(verbose: bool = False) -> None:
    """Route logging through rich on stderr; DEBUG when verbose."""
    for noisy in ("botocore", "boto3", "urllib3", "s3transfer"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    handler = RichHandler(
        console=err_console,
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
        keywords=[],
    )

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    logging.getLogger("secrets_manager").setLevel(level)

"""Main CLI entry point for pygiven."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from pygiven import __version__
from pygiven.cli import report

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
)

console = Console()

app = typer.Typer(
    name="pygiven",
    help="Given/when/then scenario reports",
    add_completion=True,
    no_args_is_help=True,
)

app.command("report", help="Generate the reports")(report.report_cmd)
app.command("clean", help="Remove the reports and intermediary files")(report.clean_cmd)


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"pygiven version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """pygiven - given/when/then scenario report tooling."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


if __name__ == "__main__":
    app()

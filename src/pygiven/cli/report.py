"""Report CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

console = Console()


def _load_config(ctx: typer.Context):
    from pygiven.config.loader import load_config

    config_file: Optional[Path] = (ctx.obj or {}).get("config_file")
    return load_config(config_file=config_file)


def report_cmd(
    ctx: typer.Context,
    fail: bool = typer.Option(
        False, "--fail", help="Generate the report, then exit with status 1"
    ),
):
    """Install the report viewer and generate its data files."""
    from pygiven.report.jgiven import ReportAppNotFoundError, generate_report

    config = _load_config(ctx)

    try:
        report_dir = generate_report(config)
    except ReportAppNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error generating report:[/red] {e}")
        raise typer.Exit(1)

    if report_dir is None:
        console.print("[yellow]No pygiven reports found, skipping report generation[/yellow]")
    else:
        console.print(f"[green]✓ Report available in[/green] {report_dir}")

    if fail:
        raise typer.Exit(1)


def clean_cmd(ctx: typer.Context):
    """Remove the reports and intermediary files."""
    from pygiven.report.jgiven import clean_reports

    config = _load_config(ctx)

    try:
        removed = clean_reports(config)
    except OSError as e:
        console.print(f"[red]Error removing reports:[/red] {e}")
        raise typer.Exit(1)

    if removed:
        console.print(f"[green]✓ Removed[/green] {config.reports.destination}")
    else:
        console.print(f"[dim]Nothing to clean in {config.reports.destination}[/dim]")

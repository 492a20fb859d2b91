"""
Lint command for Folio CLI.

Checks post files and prints a report per file, as rich tables or JSON.
"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from folio.cli.context import load_config
from folio.config.models import OutputFormat
from folio.logging import get_logger, log_execution_context
from folio.post.linter import LintReport, PostLinter, Severity

console = Console()
logger = get_logger(__name__)


def lint(
    ctx: typer.Context,
    paths: Annotated[
        Optional[list[Path]],
        typer.Argument(
            help="Post files or directories (default: the configured posts directory).",
            exists=True,
            resolve_path=False,
        ),
    ] = None,
    strict: Annotated[
        Optional[bool],
        typer.Option(
            "--strict/--no-strict",
            "-s",
            help="Treat warnings as errors.",
        ),
    ] = None,
    output_format: Annotated[
        Optional[OutputFormat],
        typer.Option(
            "--format",
            "-f",
            help="Report format.",
            case_sensitive=False,
        ),
    ] = None,
) -> None:
    """
    Check posts for front-matter and Markdown problems.

    Verifies required front-matter fields, date format, writing time and
    republication entries, unclosed code fences, and empty or unresolved
    links. Exits with code 1 when any file fails.

    [bold]Examples:[/bold]

        [dim]# Lint every post in the configured directory[/dim]
        $ folio lint

        [dim]# Lint one file, failing on warnings too[/dim]
        $ folio lint content/_posts/2017-06-28-logging.md --strict

        [dim]# Machine-readable output for CI[/dim]
        $ folio lint --format json
    """
    config = load_config(ctx, console)
    strict_mode = config.lint.strict if strict is None else strict
    fmt = output_format or config.output.format
    targets = list(paths) if paths else [Path(config.posts.directory)]

    missing = [target for target in targets if not target.exists()]
    if missing:
        console.print(
            f"[red]Error:[/red] Path not found: {', '.join(str(p) for p in missing)}"
        )
        raise typer.Exit(code=1)

    with log_execution_context(
        "folio lint",
        {"paths": targets, "strict": strict_mode, "format": fmt.value},
    ) as summary:
        linter = PostLinter(config.lint)
        reports = linter.lint_paths(targets)
        failed = [report for report in reports if not report.is_valid(strict_mode)]

        summary["files"] = len(reports)
        summary["failed"] = len(failed)
        logger.info("lint_completed", files=len(reports), failed=len(failed))

        if fmt == OutputFormat.JSON:
            payload = {
                "strict": strict_mode,
                "files": len(reports),
                "failed": len(failed),
                "reports": [report.to_dict(strict_mode) for report in reports],
            }
            typer.echo(json.dumps(payload, indent=2))
        else:
            _print_reports(reports, strict_mode, show_valid=config.output.show_valid)

    if failed:
        raise typer.Exit(code=1)


def _print_reports(reports: list[LintReport], strict: bool, show_valid: bool) -> None:
    """Print lint reports as rich tables with a summary panel."""
    if not reports:
        console.print("[yellow]No post files found.[/yellow]")
        return

    for report in reports:
        if not report.issues:
            if show_valid:
                console.print(f"[green]✓[/green] {escape(str(report.path))}")
            continue

        marker = "[green]✓[/green]" if report.is_valid(strict) else "[red]✗[/red]"
        table = Table(
            title=f"{marker} {escape(str(report.path))}",
            title_justify="left",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Line", justify="right", style="dim")
        table.add_column("Code", style="bold")
        table.add_column("Severity")
        table.add_column("Message")

        for issue in report.issues:
            color = "red" if issue.severity is Severity.ERROR else "yellow"
            table.add_row(
                str(issue.line) if issue.line is not None else "-",
                issue.code,
                f"[{color}]{issue.severity.value}[/{color}]",
                escape(issue.message),
            )
        console.print(table)

    errors = sum(len(report.errors) for report in reports)
    warnings = sum(len(report.warnings) for report in reports)
    failed = sum(1 for report in reports if not report.is_valid(strict))
    passed = failed == 0

    console.print(
        Panel(
            f"Files: [bold]{len(reports)}[/bold]  "
            f"Errors: [red]{errors}[/red]  "
            f"Warnings: [yellow]{warnings}[/yellow]  "
            f"Mode: {'Strict' if strict else 'Standard'}",
            title="Lint Passed" if passed else "Lint Failed",
            border_style="green" if passed else "red",
        )
    )

"""
'folio config' commands: write, check and print settings files.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from folio.cli.context import config_manager
from folio.config.defaults import get_default_config_yaml
from folio.config.manager import ConfigManager, ValidationResult
from folio.logging import get_logger

app = typer.Typer(
    name="config",
    help="Manage Folio configuration.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
logger = get_logger(__name__)


class ShowFormat(str, Enum):
    YAML = "yaml"
    JSON = "json"
    TABLE = "table"


@app.command("init")
def init_config(
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Where to write the settings file.",
            resolve_path=True,
        ),
    ] = Path("settings.yaml"),
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Replace an existing file."),
    ] = False,
) -> None:
    """
    Write a settings file holding every default, with comments.

    [bold]Examples:[/bold]

        $ folio config init
        $ folio config init --output folio.yaml --force
    """
    if output.exists() and not force:
        console.print(
            f"[red]Error:[/red] Configuration file already exists at {escape(str(output))}\n"
            "Use --force to overwrite."
        )
        raise typer.Exit(code=1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(get_default_config_yaml(), encoding="utf-8")

    console.print(f"[green]✓[/green] Configuration file created at: [bold]{escape(str(output))}[/bold]")
    logger.info("config_written", output=str(output), replaced=force)


@app.command("validate")
def validate_config(
    config_file: Annotated[
        Path,
        typer.Argument(
            help="Settings file to check.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    strict: Annotated[
        bool,
        typer.Option("--strict", "-s", help="Fail on warnings as well as errors."),
    ] = False,
) -> None:
    """
    Check a settings file against the Folio schema.

    Warnings cover settings that load but misbehave, such as a posts
    directory that does not exist.

    [bold]Examples:[/bold]

        $ folio config validate settings.yaml --strict
    """
    manager = ConfigManager()
    try:
        manager.load(config_file)
        result = manager.validate(strict=strict)
    except (OSError, yaml.YAMLError, ValueError) as e:
        console.print(f"[red]Error validating configuration:[/red] {escape(str(e))}")
        logger.error("config_unreadable", config_file=str(config_file), error=str(e))
        raise typer.Exit(code=1) from e

    _print_validation(config_file, result, strict)
    logger.info(
        "config_validated",
        config_file=str(config_file),
        valid=result.is_valid,
        errors=len(result.errors),
        warnings=len(result.warnings),
    )
    if not result.is_valid:
        raise typer.Exit(code=1)


@app.command("show")
def show_config(
    ctx: typer.Context,
    config_file: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Settings file to show instead of the one the root command loaded.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ] = None,
    output_format: Annotated[
        ShowFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = ShowFormat.YAML,
) -> None:
    """
    Print the merged settings: defaults, settings file and FOLIO_ variables.

    [bold]Examples:[/bold]

        $ folio config show
        $ folio --config folio.yaml config show --format table
    """
    if config_file is not None:
        manager = ConfigManager()
        manager.load(config_file)
    else:
        manager = config_manager(ctx)
    settings = manager.to_dict()

    if output_format == ShowFormat.YAML:
        text = yaml.safe_dump(settings, default_flow_style=False, sort_keys=False)
        console.print(Syntax(text, "yaml", theme="monokai", line_numbers=True))
    elif output_format == ShowFormat.JSON:
        text = json.dumps(settings, indent=2, default=str)
        console.print(Syntax(text, "json", theme="monokai", line_numbers=True))
    else:
        table = Table(title="Current Configuration", header_style="bold cyan")
        table.add_column("Key", style="dim")
        table.add_column("Value")
        for key, value in _flatten(settings):
            table.add_row(key, escape(str(value)))
        console.print(table)


def _print_validation(config_file: Path, result: ValidationResult, strict: bool) -> None:
    if result.is_valid:
        body = (
            "[green]✓ Configuration is valid[/green]\n\n"
            f"File: [bold]{escape(str(config_file))}[/bold]\n"
            f"Mode: {'Strict' if strict else 'Standard'}"
        )
        console.print(Panel(body, title="Validation Passed", border_style="green"))
    else:
        body = (
            "[red]✗ Configuration has errors[/red]\n\n"
            f"File: [bold]{escape(str(config_file))}[/bold]"
        )
        console.print(Panel(body, title="Validation Failed", border_style="red"))

    for error in result.errors:
        console.print(f"  [red]•[/red] {escape(error)}")
    for warning in result.warnings:
        console.print(f"  [yellow]![/yellow] {escape(warning)}")


def _flatten(settings: dict, prefix: str = "") -> list[tuple[str, object]]:
    rows: list[tuple[str, object]] = []
    for key, value in settings.items():
        dotted = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            rows.extend(_flatten(value, dotted))
        else:
            rows.append((dotted, value))
    return rows

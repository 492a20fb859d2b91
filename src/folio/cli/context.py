"""
Shared helpers for CLI commands.

Global options are stored on the root Typer context by ``folio.cli.main``;
commands use these helpers to turn them into a validated configuration.
"""

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from folio.config.manager import ConfigManager
from folio.config.models import FolioConfig
from folio.logging import get_logger

logger = get_logger(__name__)


def config_file_option(ctx: typer.Context) -> Optional[Path]:
    """Return the --config path given to the root command, if any."""
    if isinstance(ctx.obj, dict):
        return ctx.obj.get("config_file")
    return None


def config_manager(ctx: typer.Context) -> ConfigManager:
    """Return the settings loaded by the root command, loading them if absent."""
    manager = ctx.obj.get("config_manager") if isinstance(ctx.obj, dict) else None
    if manager is None:
        manager = ConfigManager()
        manager.load(config_file_option(ctx))
    return manager


def load_config(ctx: typer.Context, console: Console) -> FolioConfig:
    """
    Load and validate configuration for a command.

    Prints the validation errors and exits with code 1 when the merged
    configuration does not match the schema.
    """
    manager = config_manager(ctx)

    try:
        return manager.model()
    except ValidationError as e:
        console.print("[red]Error:[/red] Invalid configuration")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            console.print(f"  [red]•[/red] {location}: {error['msg']}")
        logger.error("configuration_invalid", errors=e.error_count())
        raise typer.Exit(code=1) from e

"""
Root ``folio`` command.

The callback resolves the global options once per invocation: it loads the
settings, configures logging from them, and leaves both on ``ctx.obj`` for
the subcommands.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from folio.config.manager import ConfigManager
from folio.logging import setup_logging
from folio.version import __version__

app = typer.Typer(
    name="folio",
    help="Folio - front-matter checks and post tooling for a Markdown blog",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold blue]Folio[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log at DEBUG level.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Log errors only.",
        ),
    ] = False,
    log_level: Annotated[
        Optional[str],
        typer.Option(
            "--log-level",
            "-l",
            help="Log level, overriding --verbose, --quiet and the logging section of the settings.",
            envvar="FOLIO_LOG_LEVEL",
        ),
    ] = None,
    log_format: Annotated[
        Optional[str],
        typer.Option(
            "--log-format",
            help="Log renderer: console or json.",
            envvar="FOLIO_LOG_FORMAT",
        ),
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Settings file (YAML, JSON or TOML) used instead of settings.* in the working directory.",
            envvar="FOLIO_CONFIG_FILE",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ] = None,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            help="Print the Folio version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    [bold blue]Folio[/bold blue] - post tooling for a Markdown blog

    Checks posts for front-matter and Markdown problems before the
    static-site generator sees them, and creates and edits post files.

    [dim]Use --help on any command for more information.[/dim]
    """
    ctx.ensure_object(dict)

    if verbose and quiet:
        console.print("[red]Error:[/red] Cannot use --verbose and --quiet together.")
        raise typer.Exit(code=1)

    manager = ConfigManager()
    manager.load(config_file)
    settings = manager.logging_settings()

    if log_level:
        settings["level"] = log_level
    elif verbose:
        settings["level"] = "DEBUG"
    elif quiet:
        settings["level"] = "ERROR"
    if log_format:
        settings["format"] = log_format

    setup_logging(
        level=settings["level"],
        format_type=settings["format"],
        output=settings["output"],
    )

    ctx.obj.update(
        verbose=verbose,
        quiet=quiet,
        log_level=settings["level"],
        log_format=settings["format"],
        config_file=config_file,
        config_manager=manager,
    )


from folio.cli import config as config_cmd  # noqa: E402
from folio.cli import lint as lint_cmd  # noqa: E402
from folio.cli import post as post_cmd  # noqa: E402

app.command("lint", help="Check posts for front-matter and Markdown problems.")(lint_cmd.lint)
app.add_typer(post_cmd.app, name="post", help="Create, inspect and edit posts.")
app.add_typer(config_cmd.app, name="config", help="Manage Folio configuration.")


if __name__ == "__main__":
    app()

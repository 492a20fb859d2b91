"""
Post commands for Folio CLI.

This module provides commands for creating, inspecting and editing posts.
"""

import datetime
import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from folio.cli.context import load_config
from folio.logging import get_logger
from folio.post.exceptions import FolioError
from folio.post.models import parse_post_date
from folio.post.repository import (
    add_republication,
    collect_tags,
    create_post,
    load_document,
    post_url,
    save_document,
    to_post,
)

# Create the post sub-application
app = typer.Typer(
    name="post",
    help="Create, inspect and edit posts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
logger = get_logger(__name__)


class ShowFormat(str, Enum):
    """Output formats for 'folio post show'."""

    TABLE = "table"
    YAML = "yaml"
    JSON = "json"


def _parse_date_option(value: Optional[str]) -> Optional[datetime.date]:
    if value is None:
        return None
    try:
        return parse_post_date(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command("new")
def new_post(
    ctx: typer.Context,
    title: Annotated[
        str,
        typer.Argument(help="Post title."),
    ],
    description: Annotated[
        str,
        typer.Option(
            "--description",
            "-d",
            help="One-sentence summary shown in listings.",
        ),
    ],
    tags: Annotated[
        Optional[list[str]],
        typer.Option(
            "--tag",
            "-t",
            help="Tag to attach (repeatable).",
        ),
    ] = None,
    layout: Annotated[
        Optional[str],
        typer.Option(
            "--layout",
            help="Layout name (default from configuration).",
        ),
    ] = None,
    date: Annotated[
        Optional[str],
        typer.Option(
            "--date",
            help="Publication date as YYYY-MM-DD (default: today).",
        ),
    ] = None,
    directory: Annotated[
        Optional[Path],
        typer.Option(
            "--directory",
            help="Directory to write the post to (default from configuration).",
            file_okay=False,
            dir_okay=True,
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing post with the same filename.",
        ),
    ] = False,
) -> None:
    """
    Create a new post file.

    Writes [bold]YYYY-MM-DD-slug.md[/bold] with the required front matter.

    [bold]Examples:[/bold]

        [dim]# New post dated today[/dim]
        $ folio post new "Stop logging everything" -d "Logs are not monitoring" -t logging

        [dim]# Backdated post in another directory[/dim]
        $ folio post new "Draft" -d "Notes" --date 2017-06-28 --directory drafts
    """
    config = load_config(ctx, console)
    post_date = _parse_date_option(date)
    target_dir = directory or Path(config.posts.directory)

    logger.info(
        "new_post_invoked",
        title=title,
        directory=str(target_dir),
        force=force,
    )

    try:
        path = create_post(
            target_dir,
            title=title,
            description=description,
            layout=layout or config.posts.default_layout,
            tags=tags or [],
            date=post_date,
            extension=config.posts.extension,
            force=force,
        )
    except FolioError as e:
        console.print(f"[red]Error creating post:[/red] {escape(str(e))}")
        logger.error("new_post_failed", error_code=e.error_code)
        raise typer.Exit(code=1) from e

    console.print(f"[green]✓[/green] Post created at: [bold]{path}[/bold]")


@app.command("show")
def show_post(
    ctx: typer.Context,
    path: Annotated[
        Path,
        typer.Argument(
            help="Post file.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    output_format: Annotated[
        ShowFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format (table, yaml, json).",
            case_sensitive=False,
        ),
    ] = ShowFormat.TABLE,
) -> None:
    """
    Display a post's front matter.

    [bold]Examples:[/bold]

        [dim]# Summary table[/dim]
        $ folio post show content/_posts/2017-06-28-logging.md

        [dim]# Metadata as JSON[/dim]
        $ folio post show content/_posts/2017-06-28-logging.md --format json
    """
    config = load_config(ctx, console)

    try:
        document = load_document(path)
        post = to_post(document)
    except FolioError as e:
        console.print(f"[red]Error loading post:[/red] {escape(str(e))}")
        logger.error("show_post_failed", error_code=e.error_code)
        raise typer.Exit(code=1) from e

    if output_format == ShowFormat.JSON:
        typer.echo(json.dumps(post.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return
    if output_format == ShowFormat.YAML:
        text = yaml.safe_dump(
            post.front_matter(), sort_keys=False, allow_unicode=True, default_flow_style=False
        )
        console.print(Syntax(text, "yaml", theme="monokai", line_numbers=False))
        return

    table = Table(title=escape(post.title), show_header=True, header_style="bold cyan")
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("Layout", escape(post.layout))
    table.add_row("Date", post.date.isoformat())
    table.add_row("Description", escape(post.description))
    table.add_row("Tags", escape(", ".join(post.tags)) or "[dim]None[/dim]")
    if post.writing_time is not None:
        minutes = post.writing_time.total_minutes()
        table.add_row("Writing time", f"{minutes // 60}:{minutes % 60:02d}")
    for entry in post.republished:
        language = f" ({entry.language})" if entry.language else ""
        table.add_row("Republished", escape(f"{entry.resource}{language}: {entry.link}"))
    table.add_row("Body lines", str(len(post.body.splitlines())))
    if config.site_url:
        table.add_row("URL", post_url(config.site_url, path, post.date))

    console.print(table)


@app.command("republish")
def republish_post(
    path: Annotated[
        Path,
        typer.Argument(
            help="Post file.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            writable=True,
        ),
    ],
    resource: Annotated[
        str,
        typer.Option(
            "--resource",
            "-r",
            help="Name of the site the post was republished on.",
        ),
    ],
    link: Annotated[
        str,
        typer.Option(
            "--link",
            "-u",
            help="URL of the republished copy.",
        ),
    ],
    language: Annotated[
        Optional[str],
        typer.Option(
            "--language",
            help="Language of the republished copy.",
        ),
    ] = None,
) -> None:
    """
    Record that a post was republished elsewhere.

    Appends an entry to the post's [bold]republished[/bold] list; the body
    is left untouched.

    [bold]Examples:[/bold]

        [dim]# Translation on another site[/dim]
        $ folio post republish content/_posts/2017-06-28-logging.md \\
            --resource Habr --link https://habr.com/post/1 --language ru
    """
    try:
        document = load_document(path)
        entry = add_republication(document, resource, link, language)
        save_document(path, document)
    except FolioError as e:
        console.print(f"[red]Error updating post:[/red] {escape(str(e))}")
        logger.error("republish_post_failed", error_code=e.error_code)
        raise typer.Exit(code=1) from e

    count = len(document.metadata.get("republished", []))
    console.print(
        f"[green]✓[/green] Added [bold]{escape(entry.resource)}[/bold] "
        f"({count} republication{'s' if count != 1 else ''} recorded)"
    )


@app.command("tags")
def list_tags(
    ctx: typer.Context,
    paths: Annotated[
        Optional[list[Path]],
        typer.Argument(
            help="Post files or directories (default: the configured posts directory).",
            exists=True,
        ),
    ] = None,
) -> None:
    """
    List tags used across posts.

    [bold]Examples:[/bold]

        [dim]# Tags in the configured posts directory[/dim]
        $ folio post tags
    """
    config = load_config(ctx, console)
    targets = list(paths) if paths else [Path(config.posts.directory)]
    counts = collect_tags(
        [target for target in targets if target.exists()],
        config.lint.file_patterns,
    )

    if not counts:
        console.print("[yellow]No tags found.[/yellow]")
        return

    table = Table(title="Tags", show_header=True, header_style="bold cyan")
    table.add_column("Tag", style="bold")
    table.add_column("Posts", justify="right")
    for tag, count in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
        table.add_row(escape(tag), str(count))

    console.print()
    console.print(table)
    console.print()

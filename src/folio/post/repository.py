"""
Post file operations.

Loading, saving, and creating post files following the Jekyll
``_posts/YYYY-MM-DD-slug.md`` layout, plus the edits the CLI performs on
existing posts.
"""

from __future__ import annotations

import datetime
import fnmatch
import re
import unicodedata
from collections import Counter
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from folio.logging.setup import get_logger
from folio.post.exceptions import (
    FolioError,
    PostFileError,
    PostValidationError,
    RepublicationError,
)
from folio.post.frontmatter import FrontMatterDocument, parse_document
from folio.post.models import Post, Republication, normalize_duration, split_tags

logger = get_logger(__name__)

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """
    Turn a title into a URL slug.

    Accented letters are folded to ASCII; anything else that is not a letter
    or digit becomes a single hyphen.
    """
    folded = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    slug = _NON_SLUG.sub("-", folded.lower()).strip("-")
    return slug or "post"


def post_filename(date: datetime.date, title: str, extension: str = ".md") -> str:
    """Jekyll post filename: ``YYYY-MM-DD-slug.md``."""
    return f"{date.isoformat()}-{slugify(title)}{extension}"


def post_url(site_url: str, path: Path, date: datetime.date) -> str:
    """Public URL under Jekyll's default ``/:year/:month/:day/:title.html`` permalink."""
    slug = path.stem
    prefix = f"{date.isoformat()}-"
    if slug.startswith(prefix):
        slug = slug[len(prefix):]
    return f"{site_url.rstrip('/')}/{date:%Y/%m/%d}/{slug}.html"


def load_document(path: Path) -> FrontMatterDocument:
    """
    Read and parse a post file.

    Raises:
        PostFileError: If the file cannot be read.
        FrontMatterError: If the front matter is missing or malformed.
    """
    try:
        text = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PostFileError(
            f"Cannot read post file: {e}",
            path=path,
            operation="read",
            error_code="FILE_001",
        ) from e
    return parse_document(text)


def to_post(document: FrontMatterDocument) -> Post:
    """
    Validate a document against the post schema.

    Raises:
        PostValidationError: If any field fails validation.
    """
    try:
        post = Post.model_validate(document.metadata)
    except ValidationError as e:
        field_errors = [
            (".".join(str(part) for part in error["loc"]) or "front matter", error["msg"])
            for error in e.errors()
        ]
        raise PostValidationError(
            "Front matter does not match the post schema",
            field_errors=field_errors,
        ) from e
    post.body = document.body
    return post


def load_post(path: Path) -> Post:
    """Read, parse, and validate a post file."""
    post = to_post(load_document(path))
    logger.debug("post_loaded", path=str(path), title=post.title)
    return post


def save_document(path: Path, document: FrontMatterDocument) -> None:
    """
    Write a document to disk.

    Raises:
        PostFileError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps CRLF documents byte-identical
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(document.render())
    except OSError as e:
        raise PostFileError(
            f"Cannot write post file: {e}",
            path=path,
            operation="write",
            error_code="FILE_002",
        ) from e
    logger.debug("post_saved", path=str(path), modified=document.is_modified)


def create_post(
    directory: Path,
    title: str,
    description: str,
    layout: str = "post",
    tags: Optional[Iterable[str]] = None,
    date: Optional[datetime.date] = None,
    body: str = "",
    extension: str = ".md",
    force: bool = False,
) -> Path:
    """
    Create a new post file.

    Returns:
        Path of the written file.

    Raises:
        PostValidationError: If the metadata does not form a valid post.
        PostFileError: If the file exists and ``force`` is False.
    """
    post_date = date or datetime.date.today()
    try:
        post = Post(
            layout=layout,
            title=title,
            description=description,
            date=post_date,
            tags=split_tags(list(tags or [])),
            body=body,
        )
    except ValidationError as e:
        raise PostValidationError(
            "Cannot create post",
            field_errors=[
                (".".join(str(part) for part in error["loc"]), error["msg"])
                for error in e.errors()
            ],
        ) from e

    path = directory / post_filename(post.date, post.title, extension)
    if path.exists() and not force:
        raise PostFileError(
            "Post already exists",
            path=path,
            operation="create",
            error_code="FILE_003",
        )

    content = body if not body or body.startswith("\n") else f"\n{body}"
    document = FrontMatterDocument.from_metadata(post.front_matter(), content)
    save_document(path, document)
    logger.info("post_created", path=str(path), title=post.title, date=post.date.isoformat())
    return path


def add_republication(
    document: FrontMatterDocument,
    resource: str,
    link: str,
    language: Optional[str] = None,
) -> Republication:
    """
    Append a republication record to a document's front matter.

    Raises:
        RepublicationError: If the link is already listed or the
            existing ``republished`` value is not a list.
        PostValidationError: If the new entry is invalid.
    """
    try:
        entry = Republication(resource=resource, link=link, language=language or None)
    except ValidationError as e:
        raise PostValidationError(
            "Invalid republication entry",
            field_errors=[
                (".".join(str(part) for part in error["loc"]), error["msg"])
                for error in e.errors()
            ],
        ) from e

    existing = document.metadata.get("republished")
    if existing is None:
        existing = []
    if not isinstance(existing, list):
        raise RepublicationError(
            "Existing 'republished' value is not a list",
            troubleshooting_tips=["Fix the front matter by hand, then retry"],
        )

    for record in existing:
        if isinstance(record, dict) and str(record.get("link", "")).strip() == entry.link:
            raise RepublicationError("Link is already listed as republished", link=entry.link)

    document.append_to_list("republished", entry.model_dump(exclude_none=True))
    if document.is_modified:
        _normalize_writing_time(document.metadata)
    logger.info("republication_added", resource=entry.resource, link=entry.link)
    return entry


def _normalize_writing_time(metadata: dict) -> None:
    """Write base-60 minute counts back as H:MM before the block is re-dumped."""
    writing_time = metadata.get("writing_time")
    if not isinstance(writing_time, dict):
        return
    for name, value in writing_time.items():
        try:
            writing_time[name] = normalize_duration(value)
        except ValueError:
            # left as is for the linter to report
            continue


def iter_post_files(paths: Iterable[Path], patterns: Iterable[str]) -> list[Path]:
    """
    Expand paths into post files.

    Files are returned as given; directories are searched recursively for
    names matching any pattern. The result is sorted and de-duplicated.
    """
    patterns = list(patterns)
    found: set[Path] = set()
    for path in paths:
        if path.is_dir():
            for candidate in path.rglob("*"):
                if candidate.is_file() and any(
                    fnmatch.fnmatch(candidate.name, pattern) for pattern in patterns
                ):
                    found.add(candidate)
        else:
            found.add(path)
    return sorted(found)


def collect_tags(paths: Iterable[Path], patterns: Iterable[str]) -> Counter[str]:
    """
    Count tag usage across post files.

    Files whose front matter cannot be read are skipped with a warning.
    """
    counts: Counter[str] = Counter()
    for path in iter_post_files(paths, patterns):
        try:
            document = load_document(path)
            tags = split_tags(document.metadata.get("tags"))
        except (FolioError, ValueError) as e:
            logger.warning("tags_skipped", path=str(path), error=str(e).splitlines()[0])
            continue
        counts.update(tags)
    return counts

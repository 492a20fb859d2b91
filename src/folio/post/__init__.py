"""
Post handling for Folio.

This package reads and writes Markdown posts with YAML front matter, models
their metadata, and checks them for the problems a static-site generator
would otherwise trip over at build time.

Key components:
- FrontMatterDocument: parsed post file that renders back byte-for-byte
- Post: validated front-matter metadata plus body
- PostLinter: coded content checks producing LintReport objects

Exception hierarchy:
- FolioError: Base exception
- FrontMatterError: Missing, unclosed, or malformed front matter
- PostValidationError: Front matter that does not match the post schema
- PostFileError: File read/write failures
- RepublicationError: Republication entries that cannot be appended

Example:
    >>> from folio.post import PostLinter, load_document, add_republication
    >>>
    >>> document = load_document(Path("content/_posts/2017-06-28-logging.md"))
    >>> add_republication(document, "Habr", "https://habr.com/post/1", "ru")
    >>> save_document(path, document)
"""

from folio.post.exceptions import (
    FolioError,
    FrontMatterError,
    PostFileError,
    PostValidationError,
    RepublicationError,
)
from folio.post.frontmatter import (
    DocumentParts,
    FrontMatterDocument,
    dump_front_matter,
    load_front_matter,
    parse_document,
    split_document,
)
from folio.post.linter import LintIssue, LintReport, PostLinter, Severity
from folio.post.markdown import (
    CodeFence,
    MarkdownLink,
    ReferenceDefinition,
    extract_links,
    extract_reference_definitions,
    find_unclosed_fences,
    resolve_links,
    scan_code_fences,
)
from folio.post.models import Post, Republication, WritingTime
from folio.post.repository import (
    add_republication,
    collect_tags,
    create_post,
    iter_post_files,
    load_document,
    load_post,
    post_filename,
    post_url,
    save_document,
    slugify,
    to_post,
)

__all__ = [
    # Exceptions
    "FolioError",
    "FrontMatterError",
    "PostFileError",
    "PostValidationError",
    "RepublicationError",
    # Front matter
    "DocumentParts",
    "FrontMatterDocument",
    "dump_front_matter",
    "load_front_matter",
    "parse_document",
    "split_document",
    # Models
    "Post",
    "Republication",
    "WritingTime",
    # Markdown
    "CodeFence",
    "MarkdownLink",
    "ReferenceDefinition",
    "extract_links",
    "extract_reference_definitions",
    "find_unclosed_fences",
    "resolve_links",
    "scan_code_fences",
    # Linting
    "LintIssue",
    "LintReport",
    "PostLinter",
    "Severity",
    # Files
    "add_republication",
    "collect_tags",
    "create_post",
    "iter_post_files",
    "load_document",
    "load_post",
    "post_filename",
    "post_url",
    "save_document",
    "slugify",
    "to_post",
]

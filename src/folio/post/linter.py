"""
Content checks for post files.

``PostLinter`` reads a post, checks the front matter against the post schema
and the configured rules, scans the body for unclosed code fences and empty
or unresolved links, and returns a ``LintReport`` of coded issues.

Example:
    >>> from folio.config.models import LintConfig
    >>> from folio.post.linter import PostLinter
    >>>
    >>> linter = PostLinter(LintConfig())
    >>> report = linter.lint_file(Path("content/_posts/2017-06-28-logging.md"))
    >>> report.is_valid()
    True
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from folio.config.models import LintConfig
from folio.logging.setup import bound_post, get_logger
from folio.post.exceptions import FrontMatterError
from folio.post.frontmatter import FrontMatterDocument, parse_document
from folio.post.markdown import (
    extract_reference_definitions,
    find_unclosed_fences,
    resolve_links,
)
from folio.post.models import Post, parse_post_date
from folio.post.repository import iter_post_files

logger = get_logger(__name__)

FILENAME_DATE = re.compile(r"^(?P<date>\d{4}-\d{2}-\d{2})-")


class Severity(str, Enum):
    """How an issue affects the lint result."""

    ERROR = "error"
    WARNING = "warning"


# Issue codes
MISSING_FRONT_MATTER = "FM001"
INVALID_FRONT_MATTER = "FM002"
MISSING_FIELD = "FM003"
INVALID_DATE = "FM004"
INVALID_WRITING_TIME = "FM005"
INVALID_REPUBLISHED = "FM006"
UNKNOWN_FIELD = "FM007"
UNKNOWN_LAYOUT = "FM008"
INVALID_TAGS = "FM009"
INVALID_FIELD = "FM010"
FILENAME_DATE_MISMATCH = "FS001"
UNREADABLE_FILE = "FS002"
UNCLOSED_FENCE = "MD001"
EMPTY_URL = "MD002"
UNRESOLVED_REFERENCE = "MD003"

_FIELD_CODES = {
    "date": INVALID_DATE,
    "writing_time": INVALID_WRITING_TIME,
    "republished": INVALID_REPUBLISHED,
    "tags": INVALID_TAGS,
}


@dataclass
class LintIssue:
    """A single finding in a post file."""

    code: str
    severity: Severity
    message: str
    line: Optional[int] = None
    field: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "line": self.line,
            "field": self.field,
        }


@dataclass
class LintReport:
    """All issues found in one file."""

    path: Optional[Path]
    issues: list[LintIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[LintIssue]:
        return [issue for issue in self.issues if issue.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[LintIssue]:
        return [issue for issue in self.issues if issue.severity is Severity.WARNING]

    @property
    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]

    def is_valid(self, strict: bool = False) -> bool:
        """
        Whether the file passes.

        Args:
            strict: If True, warnings also fail the file
        """
        if strict:
            return not self.issues
        return not self.errors

    def add(
        self,
        code: str,
        message: str,
        severity: Severity = Severity.ERROR,
        line: Optional[int] = None,
        field_name: Optional[str] = None,
    ) -> None:
        self.issues.append(LintIssue(code, severity, message, line, field_name))

    def to_dict(self, strict: bool = False) -> dict[str, Any]:
        return {
            "path": str(self.path) if self.path else None,
            "valid": self.is_valid(strict),
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [issue.to_dict() for issue in self.issues],
        }


def _field_lines(raw: str) -> dict[str, int]:
    """Map top-level front-matter keys to their file line numbers."""
    lines: dict[str, int] = {}
    for number, line in enumerate(raw.splitlines(), 2):
        if line and not line[0].isspace() and ":" in line and not line.startswith("#"):
            key = line.split(":", 1)[0].strip().strip("'\"")
            lines.setdefault(key, number)
    return lines


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class PostLinter:
    """
    Checks post files against the configured content rules.

    Usage:
        linter = PostLinter(LintConfig(allowed_layouts=["post"]))
        for report in linter.lint_paths([Path("content/_posts")]):
            print(report.path, report.codes)
    """

    def __init__(self, config: Optional[LintConfig] = None) -> None:
        self.config = config or LintConfig()

    def lint_text(self, text: str, path: Optional[Path] = None) -> LintReport:
        """Lint the full text of a post file."""
        report = LintReport(path=path)

        try:
            document = parse_document(text)
        except FrontMatterError as e:
            code = (
                MISSING_FRONT_MATTER
                if e.error_code == FrontMatterError.MISSING
                else INVALID_FRONT_MATTER
            )
            report.add(code, e.message, line=e.line)
            return report

        self._check_metadata(document, report)
        if path is not None and self.config.check_filename_date:
            self._check_filename(document, path, report)
        self._check_body(document, report)
        return report

    def lint_file(self, path: Path) -> LintReport:
        """Lint a single post file."""
        with bound_post(path):
            try:
                text = path.read_bytes().decode("utf-8")
            except (OSError, UnicodeDecodeError) as e:
                report = LintReport(path=path)
                report.add(UNREADABLE_FILE, f"Cannot read file: {e}")
                logger.warning("post_unreadable", error=str(e))
                return report

            report = self.lint_text(text, path)
            logger.debug(
                "post_linted",
                errors=len(report.errors),
                warnings=len(report.warnings),
            )
            return report

    def lint_paths(self, paths: Iterable[Path]) -> list[LintReport]:
        """Lint files and directories; directories are searched recursively."""
        return [self.lint_file(path) for path in iter_post_files(paths, self.config.file_patterns)]

    def _check_metadata(self, document: FrontMatterDocument, report: LintReport) -> None:
        metadata = document.metadata
        raw = document.parts.raw if document.parts is not None else ""
        lines = _field_lines(raw)

        for name in self.config.required_fields:
            if name not in metadata or _is_blank(metadata[name]):
                report.add(
                    MISSING_FIELD,
                    f"Required field '{name}' is missing or empty",
                    line=lines.get(name, 1),
                    field_name=name,
                )

        try:
            Post.model_validate(metadata)
        except ValidationError as e:
            seen: set[str] = set()
            for error in e.errors():
                name = str(error["loc"][0]) if error["loc"] else "front matter"
                if error["type"] == "missing" and len(error["loc"]) == 1:
                    continue
                if name in self.config.required_fields and _is_blank(metadata.get(name)):
                    continue
                if name in seen:
                    continue
                seen.add(name)
                report.add(
                    _FIELD_CODES.get(name, INVALID_FIELD),
                    f"Invalid '{name}': {_describe(error)}",
                    line=lines.get(name),
                    field_name=name,
                )

        if self.config.warn_unknown_fields:
            known = set(self.config.known_fields) | set(self.config.required_fields)
            for name in metadata:
                if str(name) not in known:
                    report.add(
                        UNKNOWN_FIELD,
                        f"Unknown front-matter field '{name}'",
                        severity=Severity.WARNING,
                        line=lines.get(str(name)),
                        field_name=str(name),
                    )

        layout = metadata.get("layout")
        if (
            self.config.allowed_layouts
            and isinstance(layout, str)
            and layout.strip()
            and layout not in self.config.allowed_layouts
        ):
            report.add(
                UNKNOWN_LAYOUT,
                f"Layout '{layout}' is not one of: {', '.join(self.config.allowed_layouts)}",
                severity=Severity.WARNING,
                line=lines.get("layout"),
                field_name="layout",
            )

    def _check_filename(
        self, document: FrontMatterDocument, path: Path, report: LintReport
    ) -> None:
        match = FILENAME_DATE.match(path.name)
        if match is None or "date" not in document.metadata:
            return
        try:
            post_date = parse_post_date(document.metadata["date"])
            file_date = parse_post_date(match.group("date"))
        except ValueError:
            return
        if post_date != file_date:
            report.add(
                FILENAME_DATE_MISMATCH,
                f"Filename date {file_date.isoformat()} differs from date "
                f"{post_date.isoformat()}",
                severity=Severity.WARNING,
                field_name="date",
            )

    def _check_body(self, document: FrontMatterDocument, report: LintReport) -> None:
        offset = document.body_line_offset
        body = document.body

        if self.config.check_code_fences:
            for fence in find_unclosed_fences(body):
                report.add(
                    UNCLOSED_FENCE,
                    f"Code fence '{fence.marker * fence.length}' is never closed",
                    line=fence.start_line + offset,
                )

        if not self.config.check_links:
            return

        for definition in extract_reference_definitions(body).values():
            if not definition.url.strip():
                report.add(
                    EMPTY_URL,
                    f"Reference definition '[{definition.label}]' has an empty URL",
                    line=definition.line + offset,
                )

        for link, url in resolve_links(body):
            noun = "Image" if link.is_image else "Link"
            # wrapped link text is reported on one line
            shown = " ".join((link.label if link.label is not None else link.text).split())
            if link.label is not None and url is None:
                report.add(
                    UNRESOLVED_REFERENCE,
                    f"{noun} reference '[{shown}]' has no definition",
                    line=link.line + offset,
                )
            elif link.label is None and not (url or "").strip():
                report.add(
                    EMPTY_URL,
                    f"{noun} '[{shown}]' has an empty URL",
                    line=link.line + offset,
                )


def _describe(error: dict[str, Any]) -> str:
    """Readable message for one pydantic error."""
    message = str(error["msg"])
    message = message.removeprefix("Value error, ")
    nested = [str(part) for part in error["loc"][1:]]
    if nested:
        return f"{'.'.join(nested)}: {message}"
    return message


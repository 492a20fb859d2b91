"""
Exception hierarchy for post handling.

Every error carries an error code, troubleshooting tips, and a context
dictionary, all rendered into the string form shown by the CLI.
"""

from pathlib import Path
from typing import Any, Optional


class FolioError(Exception):
    """
    Base exception for all Folio errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code for categorization.
        troubleshooting_tips: List of actionable suggestions.
        context: Additional context dictionary.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "FOLIO_000",
        troubleshooting_tips: Optional[list[str]] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.troubleshooting_tips = troubleshooting_tips or []
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with troubleshooting guidance."""
        parts = [f"[{self.error_code}] {self.message}"]

        if self.troubleshooting_tips:
            parts.append("\n\nTroubleshooting:")
            for i, tip in enumerate(self.troubleshooting_tips, 1):
                parts.append(f"  {i}. {tip}")

        if self.context:
            context_items = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"\n\nContext: {context_items}")

        return "\n".join(parts) if len(parts) > 1 else parts[0]

    def __str__(self) -> str:
        return self._format_message()


class FrontMatterError(FolioError):
    """
    The front-matter block is missing, unterminated, or not a YAML mapping.

    Attributes:
        line: 1-based line number of the problem, when known.
    """

    MISSING = "FM_001"
    UNCLOSED = "FM_002"
    INVALID_YAML = "FM_003"
    NOT_A_MAPPING = "FM_004"

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        error_code: str = "FM_001",
        troubleshooting_tips: Optional[list[str]] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        self.line = line

        ctx = context or {}
        if line is not None:
            ctx["line"] = line

        tips = troubleshooting_tips or []
        if not tips:
            tips = _front_matter_tips(error_code)

        super().__init__(
            message=message,
            error_code=error_code,
            troubleshooting_tips=tips,
            context=ctx,
        )


class PostValidationError(FolioError):
    """
    Front matter parsed but does not match the post schema.

    Attributes:
        field_errors: (field, message) pairs, one per failing field.
    """

    def __init__(
        self,
        message: str,
        field_errors: Optional[list[tuple[str, str]]] = None,
        error_code: str = "POST_001",
        troubleshooting_tips: Optional[list[str]] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        self.field_errors = field_errors or []

        ctx = context or {}
        if self.field_errors:
            ctx["fields"] = ", ".join(name for name, _ in self.field_errors)

        tips = troubleshooting_tips or []
        if not tips:
            tips = [f"{name}: {problem}" for name, problem in self.field_errors]
        if not tips:
            tips = ["Run 'folio lint' on the file for a full report"]

        super().__init__(
            message=message,
            error_code=error_code,
            troubleshooting_tips=tips,
            context=ctx,
        )


class PostFileError(FolioError):
    """
    Reading or writing a post file failed.

    Attributes:
        path: The file involved.
        operation: read, write, or create.
    """

    def __init__(
        self,
        message: str,
        path: Optional[Path] = None,
        operation: Optional[str] = None,
        error_code: str = "FILE_001",
        troubleshooting_tips: Optional[list[str]] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        self.path = path
        self.operation = operation

        ctx = context or {}
        if path is not None:
            ctx["path"] = str(path)
        if operation:
            ctx["operation"] = operation

        tips = troubleshooting_tips or []
        if not tips and error_code == "FILE_003":
            tips = ["Pass --force to overwrite the existing post"]
        if not tips:
            tips = [
                "Check that the path exists and is readable",
                "Check that the file is UTF-8 encoded",
            ]

        super().__init__(
            message=message,
            error_code=error_code,
            troubleshooting_tips=tips,
            context=ctx,
        )


class RepublicationError(FolioError):
    """A republication entry could not be appended."""

    def __init__(
        self,
        message: str,
        link: Optional[str] = None,
        error_code: str = "POST_002",
        troubleshooting_tips: Optional[list[str]] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        self.link = link

        ctx = context or {}
        if link:
            ctx["link"] = link

        super().__init__(
            message=message,
            error_code=error_code,
            troubleshooting_tips=troubleshooting_tips
            or ["Run 'folio post show' to list existing republications"],
            context=ctx,
        )


def _front_matter_tips(error_code: str) -> list[str]:
    """Get troubleshooting tips for a front-matter error code."""
    if error_code == FrontMatterError.MISSING:
        return [
            "Start the file with a line containing only '---'",
            "Close the metadata block with another '---' line",
        ]
    if error_code == FrontMatterError.UNCLOSED:
        return ["Add a line containing only '---' after the last metadata key"]
    if error_code == FrontMatterError.INVALID_YAML:
        return [
            "Quote values that contain ': ' or start with special characters",
            "Indent nested keys with spaces, not tabs",
        ]
    return ["Front matter must be 'key: value' pairs, not a list or scalar"]

"""
Pydantic models for Folio configuration validation.

This module defines type-safe configuration models that ensure
configuration correctness at load time.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(str, Enum):
    """Valid log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Valid log output formats."""

    JSON = "json"
    CONSOLE = "console"


class OutputFormat(str, Enum):
    """Valid output formats for lint reports."""

    CONSOLE = "console"
    JSON = "json"


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    model_config = ConfigDict(extra="forbid")

    level: LogLevel = Field(
        default=LogLevel.WARNING,
        description="Logging level",
    )
    format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="Log output format",
    )
    output: str = Field(
        default="stderr",
        description="Log output destination (stderr, stdout, or file path)",
    )


class LintConfig(BaseModel):
    """Configuration for post content checks."""

    model_config = ConfigDict(extra="forbid")

    required_fields: list[str] = Field(
        default_factory=lambda: ["layout", "title", "description", "date"],
        description="Front-matter keys every post must define",
    )
    known_fields: list[str] = Field(
        default_factory=lambda: [
            "layout",
            "title",
            "description",
            "date",
            "tags",
            "writing_time",
            "republished",
            "permalink",
            "image",
            "comments",
            "published",
        ],
        description="Front-matter keys accepted without a warning",
    )
    warn_unknown_fields: bool = Field(
        default=True,
        description="Warn about keys missing from known_fields",
    )
    allowed_layouts: list[str] = Field(
        default_factory=list,
        description="Layouts the site provides (empty accepts any layout)",
    )
    check_code_fences: bool = Field(
        default=True,
        description="Report code fences that are never closed",
    )
    check_links: bool = Field(
        default=True,
        description="Report links and images with empty or unresolved URLs",
    )
    check_filename_date: bool = Field(
        default=True,
        description="Compare the YYYY-MM-DD filename prefix with the date field",
    )
    file_patterns: list[str] = Field(
        default_factory=lambda: ["*.md", "*.markdown"],
        description="Glob patterns used when linting a directory",
    )
    strict: bool = Field(
        default=False,
        description="Treat warnings as errors",
    )

    @field_validator("required_fields", "known_fields", "file_patterns")
    @classmethod
    def validate_non_blank(cls, v: list[str]) -> list[str]:
        """Reject blank entries in key and pattern lists."""
        if any(not item or not item.strip() for item in v):
            raise ValueError("entries must be non-empty strings")
        return v


class PostsConfig(BaseModel):
    """Configuration for creating and locating posts."""

    model_config = ConfigDict(extra="forbid")

    directory: str = Field(
        default="content/_posts",
        description="Directory holding post files",
    )
    default_layout: str = Field(
        default="post",
        description="Layout assigned to new posts",
    )
    extension: str = Field(
        default=".md",
        description="File extension for new posts",
    )

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Normalise the extension to start with a dot."""
        v = v.strip()
        if not v:
            raise ValueError("extension must not be empty")
        return v if v.startswith(".") else f".{v}"


class OutputConfig(BaseModel):
    """Configuration for report output."""

    model_config = ConfigDict(extra="forbid")

    format: OutputFormat = Field(
        default=OutputFormat.CONSOLE,
        description="Default lint report format",
    )
    show_valid: bool = Field(
        default=True,
        description="List files without issues in console reports",
    )


class FolioConfig(BaseModel):
    """Root configuration model for Folio."""

    model_config = ConfigDict(extra="allow")

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    lint: LintConfig = Field(
        default_factory=LintConfig,
        description="Content check configuration",
    )
    posts: PostsConfig = Field(
        default_factory=PostsConfig,
        description="Post location configuration",
    )
    output: OutputConfig = Field(
        default_factory=OutputConfig,
        description="Output configuration",
    )
    site_url: Optional[str] = Field(
        default=None,
        description="Public site URL, shown by 'folio post show'",
    )

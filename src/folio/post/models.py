"""
Pydantic models for post front matter.

The models accept the shapes authors actually write (space-separated tag
strings, unquoted ``1:30`` durations that YAML reads as integers) and
normalise them; ``Post.front_matter()`` goes the other way for writing.
"""

from __future__ import annotations

import datetime
import re
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DURATION_PATTERN = re.compile(r"^(?P<hours>\d+):(?P<minutes>[0-5]\d)$")

WRITING_ACTIVITIES = ("writing", "proofreading", "decorating")


def parse_post_date(value: Any) -> datetime.date:
    """
    Parse a front-matter date.

    Accepts a ``datetime.date`` (what YAML produces for ``2017-06-28``) or a
    ``YYYY-MM-DD`` string. Datetimes are rejected.
    """
    if isinstance(value, datetime.datetime):
        raise ValueError("date must be a calendar date (YYYY-MM-DD) without a time")
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not DATE_PATTERN.match(text):
            raise ValueError(f"date must use the YYYY-MM-DD format, got {value!r}")
        try:
            return datetime.date.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"{value!r} is not a valid calendar date") from e
    raise ValueError(f"date must be a YYYY-MM-DD date, got {type(value).__name__}")


def normalize_duration(value: Union[str, int]) -> str:
    """
    Normalise an ``H:MM`` duration.

    YAML 1.1 resolves an unquoted ``1:30`` to the base-60 integer 90, so
    integers are read as total minutes.
    """
    if isinstance(value, bool):
        raise ValueError("duration must be an H:MM string")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("duration must not be negative")
        hours, minutes = divmod(value, 60)
        return f"{hours}:{minutes:02d}"
    if isinstance(value, str):
        match = DURATION_PATTERN.match(value.strip())
        if match is None:
            raise ValueError(f"duration must use the H:MM format, got {value!r}")
        return f"{int(match.group('hours'))}:{match.group('minutes')}"
    raise ValueError(f"duration must be an H:MM string, got {type(value).__name__}")


def split_tags(value: Any) -> list[str]:
    """Split tags given as a space-separated string or a list, dropping repeats."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split()
    elif isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if not isinstance(item, (str, int, float)) or isinstance(item, bool):
                raise ValueError(f"tags must be strings, got {type(item).__name__}")
            items.extend(str(item).split())
    else:
        raise ValueError(
            f"tags must be a space-separated string or a list, got {type(value).__name__}"
        )
    return list(dict.fromkeys(items))


class WritingTime(BaseModel):
    """Time spent on the post per activity. Informational only."""

    model_config = ConfigDict(extra="forbid")

    writing: Optional[str] = None
    proofreading: Optional[str] = None
    decorating: Optional[str] = None

    @field_validator("writing", "proofreading", "decorating", mode="before")
    @classmethod
    def validate_duration(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return normalize_duration(v)

    def total_minutes(self) -> int:
        """Sum of all recorded activities in minutes."""
        total = 0
        for activity in WRITING_ACTIVITIES:
            value = getattr(self, activity)
            if value is not None:
                hours, minutes = value.split(":")
                total += int(hours) * 60 + int(minutes)
        return total


class Republication(BaseModel):
    """A record of the post being syndicated on another resource."""

    model_config = ConfigDict(extra="forbid")

    resource: str = Field(min_length=1, description="Name of the resource")
    link: str = Field(min_length=1, description="URL of the republished copy")
    language: Optional[str] = Field(default=None, description="Language of the copy")

    @field_validator("resource", "link")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class Post(BaseModel):
    """
    A blog post: front-matter metadata plus the Markdown body.

    Keys the schema does not name are kept as extra fields so that
    site-generator settings such as ``permalink`` survive edits.
    """

    model_config = ConfigDict(extra="allow")

    layout: str = Field(min_length=1, description="Template that renders the post")
    title: str = Field(min_length=1, description="Display title")
    description: str = Field(min_length=1, description="Summary")
    date: datetime.date = Field(description="Publication date")
    tags: list[str] = Field(default_factory=list, description="Category labels")
    writing_time: Optional[WritingTime] = None
    republished: list[Republication] = Field(default_factory=list)
    body: str = Field(default="", exclude=True)

    @field_validator("layout", "title", "description", mode="before")
    @classmethod
    def validate_text(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v: Any) -> datetime.date:
        return parse_post_date(v)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v: Any) -> list[str]:
        return split_tags(v)

    @field_validator("republished", mode="before")
    @classmethod
    def validate_republished(cls, v: Any) -> Any:
        return [] if v is None else v

    def front_matter(self) -> dict[str, Any]:
        """
        Metadata in the shape written to a post file.

        Tags are joined into a space-separated string and empty optional
        sections are left out.
        """
        data: dict[str, Any] = {
            "layout": self.layout,
            "title": self.title,
            "description": self.description,
            "date": self.date,
        }
        if self.tags:
            data["tags"] = " ".join(self.tags)
        if self.writing_time is not None:
            data["writing_time"] = self.writing_time.model_dump(exclude_none=True)
        if self.republished:
            data["republished"] = [
                entry.model_dump(exclude_none=True) for entry in self.republished
            ]
        if self.model_extra:
            data.update(self.model_extra)
        return data

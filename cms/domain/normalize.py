"""
Boundary normalisation for content form fields.

Multipart forms deliver every value as a string (or not at all). This module
turns that loose shape into a strict ContentFields value exactly once, before
anything reaches the lifecycle or media logic. Anything that cannot be parsed
raises FieldError; nothing falls back silently.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from cms.domain.entities import ContentStatus

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


class FieldError(ValueError):
    """A form field could not be parsed into its strict type."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class ContentFields(BaseModel):
    """
    Parsed content fields. None means "not supplied".

    On create, missing required fields are reported by the content component;
    on update, None keeps the stored value.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    excerpt: str | None = None
    body: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    featured: bool | None = None
    duration: str | None = None
    status: ContentStatus | None = None
    scheduled_at: datetime | None = None
    author_id: UUID | None = None

    @field_validator("title", "excerpt", "body", "duration", "category")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None

    @field_validator("tags", mode="before")
    @classmethod
    def _parse_tags(cls, value: Any) -> Any:
        if value is None or isinstance(value, list):
            return value
        if not isinstance(value, str):
            raise ValueError("Tags must be a list of strings")
        text = value.strip()
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError as e:
                raise ValueError(f"Tags are not a valid JSON array: {e.msg}") from e
            if not isinstance(parsed, list) or not all(isinstance(t, str) for t in parsed):
                raise ValueError("Tags must be a list of strings")
            return parsed
        return text.split(",")

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [t.strip() for t in value if t.strip()]

    @field_validator("featured", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise ValueError(f"Invalid boolean value: {value!r}")
        return value

    @field_validator("scheduled_at")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


def normalize_fields(raw: Mapping[str, Any]) -> ContentFields:
    """
    Parse raw request values into ContentFields.

    Raises:
        FieldError: for the first field that fails to parse.
    """
    # Empty form inputs mean "not supplied".
    supplied = {
        key: value
        for key, value in raw.items()
        if value is not None and not (isinstance(value, str) and not value.strip())
    }
    try:
        return ContentFields.model_validate(supplied)
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else "form"
        message = first["msg"].removeprefix("Value error, ")
        raise FieldError(field, f"Invalid {field}: {message}") from e

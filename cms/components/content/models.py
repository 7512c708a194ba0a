"""
Content component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from cms.components.attachments import Upload
from cms.domain.entities import ContentItem, ContentKind, ContentStatus, Identity, SortKey
from cms.domain.normalize import ContentFields

# --- Validation Error ---


@dataclass(frozen=True)
class ContentValidationError:
    """
    Content operation error.

    Codes with special meaning at the HTTP boundary:
    not_found, unauthorized, forbidden. Everything else is a validation error.
    """

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class CreateContentInput:
    """Input for creating a blog post or podcast episode."""

    kind: ContentKind
    fields: ContentFields
    actor: Identity
    uploads: tuple[Upload, ...] = ()


@dataclass(frozen=True)
class UpdateContentInput:
    """Input for updating an item; unset fields keep their stored value."""

    kind: ContentKind
    content_id: UUID
    fields: ContentFields
    actor: Identity
    uploads: tuple[Upload, ...] = ()


@dataclass(frozen=True)
class DeleteContentInput:
    kind: ContentKind
    content_id: UUID
    actor: Identity


@dataclass(frozen=True)
class GetContentInput:
    """Single-item read; counts as a view."""

    kind: ContentKind
    content_id: UUID
    viewer: Identity | None = None


@dataclass(frozen=True)
class ListContentInput:
    """Listing filter. status None lists every status (admin only)."""

    kind: ContentKind
    status: ContentStatus | None = None
    search: str | None = None
    sort: SortKey = "newest"
    limit: int = 50
    offset: int = 0
    viewer: Identity | None = None


# --- Output Models ---


@dataclass(frozen=True)
class ContentOperationOutput:
    """Output for create, update, delete and get."""

    content: ContentItem | None = None
    errors: list[ContentValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ContentListOutput:
    items: list[ContentItem]
    total: int
    limit: int
    offset: int
    errors: list[ContentValidationError] = field(default_factory=list)
    success: bool = True

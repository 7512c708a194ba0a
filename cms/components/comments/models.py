"""
Comments component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from cms.domain.entities import Comment, Identity


@dataclass(frozen=True)
class CommentError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class AddCommentInput:
    """Any signed-in user may comment; actor None means no token was sent."""

    content_id: UUID
    text: str
    actor: Identity | None


@dataclass(frozen=True)
class DeleteCommentInput:
    content_id: UUID
    comment_id: UUID
    actor: Identity | None


@dataclass(frozen=True)
class CommentOutput:
    comment: Comment | None = None
    errors: list[CommentError] = field(default_factory=list)
    success: bool = True

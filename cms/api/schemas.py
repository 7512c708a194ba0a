from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from cms.domain.entities import (
    ActivityCategory,
    ActivityRecord,
    Comment,
    ContentCategory,
    ContentItem,
    ContentStatus,
)

# Public URL prefix under which stored media is served
MEDIA_URL_PREFIX = "/uploads/"


def media_url(key: str | None) -> str | None:
    return f"{MEDIA_URL_PREFIX}{key}" if key else None


# --- Content Items ---
class ContentResponseBase(BaseModel):
    id: UUID
    title: str
    excerpt: str
    category: ContentCategory
    tags: list[str]
    featured: bool
    image: str | None = None
    status: ContentStatus
    scheduled_at: datetime | None = None
    author: UUID
    views: int
    created_at: datetime
    updated_at: datetime


class CommentResponse(BaseModel):
    id: UUID
    user: UUID
    name: str
    text: str
    created_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            user=comment.user_id,
            name=comment.name,
            text=comment.text,
            created_at=comment.created_at,
        )


class CommentCreateRequest(BaseModel):
    # Missing text is reported by the comments component, not as a 422
    text: str = ""


class BlogResponse(ContentResponseBase):
    content: str
    comments: list[CommentResponse] = []


class PodcastResponse(ContentResponseBase):
    description: str
    audio: str | None = None
    duration: str


def _base_fields(item: ContentItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "excerpt": item.excerpt,
        "category": item.category,
        "tags": item.tags,
        "featured": item.featured,
        "image": media_url(item.media.get("image")),
        "status": item.status,
        "scheduled_at": item.scheduled_at,
        "author": item.author_id,
        "views": item.views,
        "created_at": item.created_at,
        "updated_at": item.updated_at,
    }


def to_response(item: ContentItem) -> BlogResponse | PodcastResponse:
    if item.kind == "podcast":
        return PodcastResponse(
            **_base_fields(item),
            description=item.body,
            audio=media_url(item.media.get("audio")),
            duration=item.duration,
        )
    return BlogResponse(
        **_base_fields(item),
        content=item.body,
        comments=[CommentResponse.from_comment(c) for c in item.comments],
    )


class ContentListResponse(BaseModel):
    items: list[BlogResponse | PodcastResponse]
    total: int
    limit: int
    offset: int


class DeleteResponse(BaseModel):
    id: UUID
    message: str


# --- Activity ---
class ActivityResponse(BaseModel):
    id: UUID
    action: str
    actor: str
    category: ActivityCategory
    detail: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: ActivityRecord) -> "ActivityResponse":
        return cls(**record.model_dump())

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from cms.domain.entities import (
    ActivityRecord,
    Comment,
    ContentItem,
    ContentKind,
    ContentStatus,
    SortKey,
    User,
)


@dataclass(frozen=True)
class ContentQuery:
    """Predicate for listing content. None means "any"."""

    kind: ContentKind | None = None
    status: ContentStatus | None = None
    search: str | None = None  # case-insensitive substring of title/excerpt/body
    sort: SortKey = "newest"
    limit: int = 50
    offset: int = 0


class UserRepoPort(Protocol):
    def get_by_id(self, user_id: UUID) -> User | None:
        ...

    def save(self, user: User) -> User:
        ...


class ContentRepoPort(Protocol):
    def save(self, item: ContentItem) -> ContentItem:
        """Insert or update by id."""
        ...

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        ...

    def find_by_title(self, kind: ContentKind, title: str) -> ContentItem | None:
        """Case-insensitive exact title match."""
        ...

    def list(self, query: ContentQuery) -> list[ContentItem]:
        ...

    def count(self, query: ContentQuery) -> int:
        ...

    def delete(self, item_id: UUID) -> bool:
        """Delete by id. Returns False if nothing was deleted."""
        ...

    def increment_views(self, item_id: UUID) -> None:
        ...

    def list_due(self, now_utc: datetime, limit: int = 100) -> list[ContentItem]:
        """Scheduled items whose scheduled_at <= now_utc."""
        ...

    def publish_if_due(self, item_id: UUID, now_utc: datetime) -> bool:
        """
        Conditionally promote a scheduled item to published.

        The status and schedule are re-checked inside the write itself.
        Returns True only if this call changed the row.
        """
        ...


class CommentRepoPort(Protocol):
    """Comments live apart from the item row, so saving an item never drops one."""

    def add_comment(self, item_id: UUID, comment: Comment) -> bool:
        """Returns False if the item no longer exists."""
        ...

    def get_comment(self, item_id: UUID, comment_id: UUID) -> Comment | None:
        ...

    def delete_comment(self, item_id: UUID, comment_id: UUID) -> bool:
        ...


class ActivityRepoPort(Protocol):
    def append(self, record: ActivityRecord) -> ActivityRecord:
        ...

    def recent(self, limit: int = 10) -> list[ActivityRecord]:
        ...

from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
RoleType = Literal["user", "admin"]
ContentKind = Literal["blog", "podcast"]
ContentStatus = Literal["draft", "published", "scheduled"]
ContentCategory = Literal[
    "advocacy",
    "survivor-stories",
    "prevention",
    "education",
    "policy",
    "community",
    "",
]
ActivityCategory = Literal[
    "user", "blog", "podcast", "comment", "newsletter", "resource", "report"
]
SortKey = Literal["newest", "title", "views"]

# "policy" only exists for blog posts.
CATEGORIES: dict[ContentKind, tuple[str, ...]] = {
    "blog": (
        "advocacy",
        "survivor-stories",
        "prevention",
        "education",
        "policy",
        "community",
        "",
    ),
    "podcast": ("advocacy", "survivor-stories", "prevention", "education", "community", ""),
}


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Identity ---


class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    name: str
    role: RoleType = "user"
    created_at: datetime = Field(default_factory=utcnow)


class Identity(BaseModel):
    """Caller identity handed to every mutating operation."""

    user_id: UUID
    name: str
    role: RoleType

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# --- Content ---


class Comment(BaseModel):
    """Reader comment on a blog post. `name` is the commenter's name when posted."""

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    name: str
    text: str
    created_at: datetime = Field(default_factory=utcnow)

    model_config = {"frozen": True}


class ContentItem(BaseModel):
    """
    Blog post or podcast episode.

    Invariants:
    - status == "scheduled" implies scheduled_at is set
    - status != "scheduled" implies scheduled_at is None
    - media values are stored-file keys owned exclusively by this item
    """

    id: UUID = Field(default_factory=uuid4)
    kind: ContentKind
    title: str
    excerpt: str = ""
    body: str
    category: ContentCategory = ""
    tags: list[str] = Field(default_factory=list)
    featured: bool = False
    duration: str = ""

    media: dict[str, str] = Field(default_factory=dict)

    status: ContentStatus = "draft"
    scheduled_at: datetime | None = None

    author_id: UUID
    views: int = 0

    # Blog posts only. Stored apart from the item row; see CommentRepoPort.
    comments: list[Comment] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Activity ---


class ActivityRecord(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    action: str
    actor: str
    category: ActivityCategory
    detail: str = ""
    created_at: datetime = Field(default_factory=utcnow)

    model_config = {"frozen": True}

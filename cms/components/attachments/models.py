"""
Attachments component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# --- Validation Error ---


@dataclass(frozen=True)
class AttachmentError:
    """Attachment rejection with an actionable message."""

    code: str
    message: str
    field: str = "file"


# --- Constraints ---


@dataclass(frozen=True)
class AttachmentRule:
    """Constraints for one logical upload field (e.g. "image", "audio")."""

    max_bytes: int
    mime_types: tuple[str, ...]
    extensions: tuple[str, ...]
    max_files: int = 1


# --- Input Models ---


@dataclass(frozen=True)
class Upload:
    """One uploaded payload as received at the boundary."""

    field: str
    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class StoreAttachmentsInput:
    """Input for storing every upload of one request."""

    uploads: tuple[Upload, ...]
    rules: dict[str, AttachmentRule]


# --- Output Models ---


@dataclass(frozen=True)
class StoreOutput:
    """Stored keys by field, or the errors that prevented storing."""

    refs: dict[str, str] = field(default_factory=dict)
    errors: list[AttachmentError] = field(default_factory=list)
    success: bool = True

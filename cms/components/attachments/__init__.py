"""
Attachments component - Validated storage and best-effort removal of uploads.
"""

from .component import run_remove, run_store, validate_uploads
from .models import (
    AttachmentError,
    AttachmentRule,
    StoreAttachmentsInput,
    StoreOutput,
    Upload,
)
from .ports import FileStorePort

__all__ = [
    # Entry points
    "run_remove",
    "run_store",
    "validate_uploads",
    # Models
    "AttachmentError",
    "AttachmentRule",
    "StoreAttachmentsInput",
    "StoreOutput",
    "Upload",
    # Ports
    "FileStorePort",
]

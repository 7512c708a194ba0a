"""
Media component port definitions.
"""

from __future__ import annotations

from cms.components.attachments.ports import FileStorePort

__all__ = ["FileStorePort"]

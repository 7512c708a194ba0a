"""
Attachments component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class FileStorePort(Protocol):
    """Durable named storage for uploaded bytes."""

    def save(self, name: str, data: bytes) -> str:
        """Atomically store bytes under a new unique key; return the key."""
        ...

    def exists(self, key: str) -> bool:
        ...

    def delete(self, key: str) -> None:
        """Remove a stored file. Raises FileNotFoundError if missing."""
        ...

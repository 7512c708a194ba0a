import logging
import os
import re
import secrets
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def unique_name(original: str) -> str:
    """Build a collision-free file name: <epoch ms>-<random>-<sanitised original>."""
    base = _UNSAFE_CHARS.sub("_", Path(original).name).strip("._") or "upload"
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}-{base}"


class FileSystemStore:
    """
    Attachment directory on local disk.

    Writes are atomic: bytes land in a temporary file inside the root and are
    renamed into place, so a key either resolves to a complete file or does
    not exist at all.
    """

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path).resolve()
        if not self.base_path.is_dir():
            raise FileNotFoundError(f"Attachment root does not exist: {self.base_path}")

    def _safe_path(self, key: str) -> Path:
        # Prevent traversal
        target = (self.base_path / key).resolve()
        if target.parent != self.base_path:
            raise ValueError(f"Path traversal attempt detected: {key}")
        return target

    def save(self, name: str, data: bytes) -> str:
        """Save bytes under a new unique key and return the key."""
        key = unique_name(name)
        target = self._safe_path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.base_path, prefix=".upload-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            # Also covers cancellation mid-write
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return key

    def get(self, key: str) -> bytes:
        """Retrieve bytes by key. Raises FileNotFoundError."""
        target = self._safe_path(key)
        if not target.is_file():
            raise FileNotFoundError(f"File not found: {key}")
        return target.read_bytes()

    def exists(self, key: str) -> bool:
        try:
            return self._safe_path(key).is_file()
        except ValueError:
            return False

    def delete(self, key: str) -> None:
        """Delete by key. Raises FileNotFoundError if missing."""
        os.remove(self._safe_path(key))


@contextmanager
def attachment_root(path: str | Path) -> Iterator[FileSystemStore]:
    """
    Acquire the attachment root for the lifetime of the process.

    Creating the directory is idempotent, so every process may enter it.
    """
    root = Path(path)
    root.mkdir(parents=True, exist_ok=True)
    logger.info("Attachment root ready at %s", root.resolve())
    yield FileSystemStore(root)

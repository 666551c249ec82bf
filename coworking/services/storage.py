"""Local filesystem blob store for office images."""
from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from uuid import uuid4

from ..core.config import settings

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Store blobs under a root directory and address them by relative path."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def store(self, filename: str, content: bytes) -> str:
        """Write ``content`` under a unique name keeping the file extension."""

        suffix = PurePosixPath(filename).suffix.lower()
        relative = f"{uuid4().hex}{suffix}"
        target = self._resolve(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        return relative

    def delete(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.exists():
            logger.warning("Blob %s already missing", path)
            return False
        target.unlink()
        return True

    def _resolve(self, path: str) -> Path:
        root = self._root.resolve()
        target = (root / path).resolve()
        if root != target and root not in target.parents:
            raise ValueError(f"blob path escapes store root: {path}")
        return target


blob_store = LocalBlobStore(settings.media_root)

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Blob storage for uploaded image bytes.
Objects are addressed by a generated relative path "<namespace>/<uuid><ext>".
"""

import mimetypes
import uuid
from pathlib import Path
from typing import Optional, Protocol

from app.core.logging import get_logger

logger = get_logger(__name__)

# mimetypes picks odd extensions for a few of these
_PREFERRED_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/tiff": ".tif",
    "image/tif": ".tif",
    "image/svg+xml": ".svg",
    "image/x-icon": ".ico",
    "image/heic": ".heic",
    "image/heif": ".heif",
    "image/webp": ".webp",
}


class BlobStoreError(Exception):
    """Base exception for blob storage errors."""


class BlobStore(Protocol):
    def put(self, namespace: str, content: bytes, mime_type: Optional[str] = None) -> str: ...

    def get(self, path: str) -> Optional[bytes]: ...

    def delete(self, path: str) -> bool: ...

    def exists(self, path: str) -> bool: ...


def extension_for(mime_type: Optional[str]) -> str:
    if not mime_type:
        return ""
    mime_type = mime_type.lower()
    return _PREFERRED_EXTENSIONS.get(mime_type) or mimetypes.guess_extension(mime_type) or ""


class LocalBlobStore:
    """Filesystem-backed blob store rooted at a single directory."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        if not path:
            raise BlobStoreError("Empty blob path")
        target = (self._root / path).resolve()
        if target != self._root and self._root not in target.parents:
            raise BlobStoreError(f"Blob path escapes storage root: {path}")
        return target

    # ── Write ──

    def put(self, namespace: str, content: bytes, mime_type: Optional[str] = None) -> str:
        """Store bytes under a fresh path in `namespace`; return the relative path."""
        path = f"{namespace.strip('/')}/{uuid.uuid4().hex}{extension_for(mime_type)}"
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.info("Blob stored path=%s bytes=%d", path, len(content))
        return path

    def delete(self, path: str) -> bool:
        """Remove a blob. Returns False when nothing was there; never raises for a missing path."""
        target = self._resolve(path)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        logger.info("Blob deleted path=%s", path)
        return True

    # ── Read ──

    def get(self, path: str) -> Optional[bytes]:
        try:
            target = self._resolve(path)
        except BlobStoreError:
            return None
        if not target.is_file():
            return None
        return target.read_bytes()

    def exists(self, path: str) -> bool:
        try:
            return self._resolve(path).is_file()
        except BlobStoreError:
            return False

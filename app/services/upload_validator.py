# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Profile image upload validation.
Decides whether an upload candidate may become a stored profile image and
classifies every rejection. Returns AcceptedUpload | UploadError; never raises.
"""

import io
import logging
import mimetypes
from typing import Optional

from PIL import Image, UnidentifiedImageError

from app.core.config import convert_to_bytes, settings
from app.core.logging import get_logger
from app.metrics import UPLOADS_TOTAL
from app.models.domain import (
    AcceptedUpload,
    UploadCandidate,
    UploadError,
    UploadErrorCode,
    UploadErrorKind,
)
from app.repositories.blob_store import BlobStore

NAMESPACE = "team-members"

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg", "image/jpg", "image/png", "image/gif",
    "image/webp", "image/bmp", "image/svg+xml", "image/x-icon",
    "image/tiff", "image/tif", "image/heic", "image/heif",
})

# Types Pillow would have recognised by content; a claim of one of these on
# bytes Pillow could not open is not trusted.
_DECODABLE_CLAIMS = frozenset({
    "image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp",
    "image/bmp", "image/x-icon", "image/tiff", "image/tif",
})

_SIZE_LIMIT_CODES = (UploadErrorCode.INI_SIZE, UploadErrorCode.FORM_SIZE)

_PROBE_ERRORS = (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError)

_HEIC_BRANDS = (b"heic", b"heix", b"hevc", b"hevx", b"heim", b"heis")
_HEIF_BRANDS = (b"mif1", b"msf1", b"heif")


def probe_dimensions(content: bytes) -> Optional[tuple[int, int]]:
    """Best-effort (width, height); None when the bytes are not a readable raster image."""
    try:
        with Image.open(io.BytesIO(content)) as img:
            return img.size
    except _PROBE_ERRORS:
        return None


def sniff_mime_type(content: bytes, claimed: Optional[str] = None,
                    filename: Optional[str] = None) -> str:
    """Determine the MIME type from content first, then the client's claim, then the filename."""
    try:
        with Image.open(io.BytesIO(content)) as img:
            fmt = img.format
        mime = Image.MIME.get(fmt) if fmt else None
        if mime:
            return mime
    except _PROBE_ERRORS:
        pass

    head = content[:4096].lstrip().lower()
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
        return "image/svg+xml"
    if content[4:8] == b"ftyp":
        brand = content[8:12]
        if brand in _HEIC_BRANDS:
            return "image/heic"
        if brand in _HEIF_BRANDS:
            return "image/heif"
        if brand in (b"avif", b"avis"):
            return "image/avif"

    claimed = (claimed or "").split(";")[0].strip().lower()
    if not claimed and filename:
        claimed = (mimetypes.guess_type(filename)[0] or "").lower()
    if claimed and claimed not in _DECODABLE_CLAIMS and claimed != "application/octet-stream":
        return claimed

    try:
        content[:4096].decode("utf-8")
    except UnicodeDecodeError:
        return "application/octet-stream"
    return "text/plain" if content else "application/x-empty"


class UploadValidator:
    """Validates upload candidates and writes accepted ones to the blob store."""

    def __init__(
        self,
        blob_store: BlobStore,
        max_kb: int = settings.MAX_IMAGE_KB,
        upload_max_filesize: Optional[str] = None,
        post_max_size: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._blobs = blob_store
        self._max_kb = max_kb
        self._upload_max_filesize = upload_max_filesize
        self._post_max_size = post_max_size
        self._log = logger or get_logger(__name__)

    @property
    def upload_max_filesize(self) -> str:
        return self._upload_max_filesize or settings.UPLOAD_MAX_FILESIZE

    @property
    def post_max_size(self) -> str:
        return self._post_max_size or settings.POST_MAX_SIZE

    def validate(self, candidate: Optional[UploadCandidate]) -> AcceptedUpload | UploadError:
        if candidate is None or not candidate.is_valid:
            return self._invalid_file(candidate)
        try:
            result = self._check_and_store(candidate)
        except Exception as exc:
            self._log.error(
                "Image upload error: %s file=%s", exc, candidate.filename or "unknown", exc_info=True,
            )
            result = self._reject(
                UploadErrorKind.UPLOAD_INTERNAL_ERROR,
                f"The profile image failed to upload: {exc}",
            )
        if isinstance(result, AcceptedUpload):
            UPLOADS_TOTAL.labels(outcome="accepted").inc()
        return result

    # ── Steps ──

    def _check_and_store(self, candidate: UploadCandidate) -> AcceptedUpload | UploadError:
        size_kb = candidate.size / 1024
        if size_kb > self._max_kb:
            return self._reject(
                UploadErrorKind.TOO_LARGE,
                f"The image is too large. Maximum size is {self._max_kb // 1024}MB.",
            )

        dimensions = probe_dimensions(candidate.content)
        if dimensions:
            self._log.info(
                "Image dimensions width=%d height=%d size=%.2fKB",
                dimensions[0], dimensions[1], size_kb,
            )

        mime_type = sniff_mime_type(candidate.content, candidate.content_type, candidate.filename)
        if mime_type not in ALLOWED_MIME_TYPES:
            self._log.warning(
                "Unsupported MIME type mime=%s filename=%s", mime_type, candidate.filename,
            )
            if not mime_type.startswith("image/"):
                return self._reject(
                    UploadErrorKind.UNSUPPORTED_TYPE,
                    f"The file must be an image. Detected type: {mime_type}",
                )

        path = self._blobs.put(NAMESPACE, candidate.content, mime_type)
        if not path:
            self._log.error(
                "File store returned no path filename=%s mime=%s size=%.2fKB",
                candidate.filename, mime_type, size_kb,
            )
            return self._reject(
                UploadErrorKind.STORAGE_WRITE_FAILED,
                "The profile image failed to upload. Please try again.",
            )

        self._log.info(
            "Image uploaded successfully path=%s mime=%s size=%.2fKB", path, mime_type, size_kb,
        )
        return AcceptedUpload(
            path=path,
            mime_type=mime_type,
            size=candidate.size,
            width=dimensions[0] if dimensions else None,
            height=dimensions[1] if dimensions else None,
        )

    def _invalid_file(self, candidate: Optional[UploadCandidate]) -> UploadError:
        code = "File not found" if candidate is None else str(int(candidate.error))
        message = f"The uploaded file is not valid. Error code: {code}"
        if candidate is not None and candidate.error in _SIZE_LIMIT_CODES:
            message += (
                f". Upload limit is {self.upload_max_filesize}."
                " Please increase UPLOAD_MAX_FILESIZE and POST_MAX_SIZE."
            )
        self._log.error(
            "Invalid file upload error=%s upload_max_filesize=%s (%d bytes) post_max_size=%s (%d bytes)",
            code,
            self.upload_max_filesize, convert_to_bytes(self.upload_max_filesize),
            self.post_max_size, convert_to_bytes(self.post_max_size),
        )
        return self._reject(UploadErrorKind.INVALID_FILE, message, code=code)

    def _reject(self, kind: UploadErrorKind, message: str, code: Optional[str] = None) -> UploadError:
        UPLOADS_TOTAL.labels(outcome=kind.value).inc()
        return UploadError(kind=kind, message=message, code=code)

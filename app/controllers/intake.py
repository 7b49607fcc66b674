# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request intake: turn a JSON or form submission into (raw_fields, upload_candidate).
Transport-level ceilings are enforced here and reported as upload error codes.
"""
from typing import Any, Optional

from fastapi import HTTPException, Request
from starlette.datastructures import UploadFile

from app.core.config import settings
from app.models.domain import UploadCandidate, UploadErrorCode

IMAGE_FIELD = "profile_image"
CHUNK_SIZE = 1024 * 1024


async def read_submission(
    request: Request, max_bytes: Optional[int] = None,
) -> tuple[dict[str, Any], Optional[UploadCandidate]]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON body")
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="JSON body must be an object")
        body.pop(IMAGE_FIELD, None)
        return body, None

    form = await request.form()
    fields = {k: v for k, v in form.items() if isinstance(v, str) and k != IMAGE_FIELD}
    upload = form.get(IMAGE_FIELD)
    candidate = None
    if isinstance(upload, UploadFile):
        limit = settings.upload_max_bytes if max_bytes is None else max_bytes
        candidate = await to_candidate(upload, limit, form_limit=_form_limit(fields))
    return fields, candidate


async def to_candidate(
    upload: UploadFile, max_bytes: int, form_limit: Optional[int] = None,
) -> Optional[UploadCandidate]:
    """Read an uploaded part. None when the part is empty and unnamed (no file chosen)."""
    chunks: list[bytes] = []
    total = 0
    error = UploadErrorCode.OK
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if max_bytes and total > max_bytes:
            error = UploadErrorCode.INI_SIZE
            break
        if form_limit and total > form_limit:
            error = UploadErrorCode.FORM_SIZE
            break
        chunks.append(chunk)
    await upload.close()

    if error != UploadErrorCode.OK:
        return UploadCandidate(
            filename=upload.filename, content_type=upload.content_type, size=total, error=error,
        )
    if total == 0 and not upload.filename:
        return None
    return UploadCandidate(
        filename=upload.filename,
        content=b"".join(chunks),
        content_type=upload.content_type,
        size=total,
    )


def _form_limit(fields: dict[str, Any]) -> Optional[int]:
    raw = str(fields.get("MAX_FILE_SIZE", "")).strip()
    return int(raw) if raw.isdigit() and int(raw) > 0 else None

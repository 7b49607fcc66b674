# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: serve stored profile images from the blob store."""
import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from starlette.responses import Response

from app.core.dependencies import get_blob_store
from app.repositories.blob_store import LocalBlobStore

router = APIRouter(tags=["Storage"])

# Stored files never execute as documents (SVG scripts, HTML).
STORAGE_HEADERS = {
    "Cache-Control": "public, max-age=86400",
    "X-Content-Type-Options": "nosniff",
    "Content-Security-Policy": "default-src 'none'; style-src 'unsafe-inline'; sandbox",
}


@router.get("/storage/{path:path}")
def get_stored_file(path: str, blobs: LocalBlobStore = Depends(get_blob_store)):
    content = blobs.get(path)
    if content is None:
        raise HTTPException(status_code=404, detail="File not found")
    media_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
    return Response(
        content=content,
        media_type=media_type,
        headers=STORAGE_HEADERS,
    )

# type: ignore
# pyright: reportGeneralTypeIssues=false
"""
Team Directory Service
======================
Team member profiles with a public JSON API and an authenticated admin
dashboard. Profile images are validated, stored in the blob store and
cleaned up when replaced or when their member is deleted.

Layers: controllers → services → repositories (record store, blob store).
"""
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.controllers import admin_controller, storage_controller, system_controller, team_member_controller
from app.core.config import settings
from app.core.dependencies import get_blob_store, get_team_member_repo
from app.core.logging import get_logger
from app.metrics import MEMBERS_TOTAL
from app.middleware import MetricsMiddleware, RequestIDMiddleware
from app.repositories.team_member_repository import SqlTeamMemberRepository
from app.schemas import ErrorResponse

logger = get_logger("main")


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Prepare storage and schema at startup; dispose the pool on shutdown."""
    repo = get_team_member_repo()
    Path(get_blob_store().root).mkdir(parents=True, exist_ok=True)
    if isinstance(repo, SqlTeamMemberRepository):
        try:
            repo.ensure_schema()
        except Exception as exc:
            logger.error("Record store unavailable, service will start but DB calls will fail: %s", exc)
    try:
        MEMBERS_TOTAL.set(repo.count())
    except Exception as exc:
        logger.warning("Could not seed member gauge: %s", exc)
    logger.info("%s %s starting record_store=%s storage_root=%s",
                settings.SERVICE_NAME, settings.SERVICE_VERSION,
                type(repo).__name__, get_blob_store().root)
    yield
    if isinstance(repo, SqlTeamMemberRepository):
        repo.dispose()
    logger.info("Shutting down")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Team Directory Service",
    description="Team member profiles with image uploads and an admin dashboard.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        422: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)

app.include_router(system_controller.router)
app.include_router(team_member_controller.router)
app.include_router(storage_controller.router)
app.include_router(admin_controller.router)


# ── Exception handlers ────────────────────────────────────────────────────
@app.exception_handler(StarletteHTTPException)
async def api_http_exception_handler(request: Request, exc: StarletteHTTPException):
    if request.url.path.startswith("/api/"):
        body = ErrorResponse(message=str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True),
                            headers=getattr(exc, "headers", None))
    return await http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "request_id": req_id},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection: wire repositories and services.
"""

from app.core.config import settings
from app.core.database import build_engine
from app.repositories.blob_store import LocalBlobStore
from app.repositories.session_repository import SessionRepository
from app.repositories.team_member_repository import (
    InMemoryTeamMemberRepository,
    SqlTeamMemberRepository,
)
from app.services.auth_service import AuthService
from app.services.team_member_service import TeamMemberService
from app.services.upload_validator import UploadValidator

# ── Singleton repository instances ──
_engine = build_engine()
_team_member_repo = (
    SqlTeamMemberRepository(_engine) if _engine is not None else InMemoryTeamMemberRepository()
)
_blob_store = LocalBlobStore(settings.STORAGE_ROOT)
_session_repo = SessionRepository()

# ── Service instances (with injected dependencies) ──
_upload_validator = UploadValidator(_blob_store)
_team_member_service = TeamMemberService(
    repo=_team_member_repo,
    blob_store=_blob_store,
    validator=_upload_validator,
)
_auth_service = AuthService(_session_repo)


# ── FastAPI dependency functions ──
def get_team_member_service() -> TeamMemberService:
    return _team_member_service


def get_auth_service() -> AuthService:
    return _auth_service


def get_team_member_repo():
    return _team_member_repo


def get_blob_store() -> LocalBlobStore:
    return _blob_store


def get_session_repo() -> SessionRepository:
    return _session_repo

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package: re-exports the record, blob and session stores."""
from app.repositories.blob_store import BlobStore, BlobStoreError, LocalBlobStore
from app.repositories.session_repository import SessionRepository
from app.repositories.team_member_repository import (
    InMemoryTeamMemberRepository,
    SqlTeamMemberRepository,
    TeamMemberRepository,
)

__all__ = [
    "BlobStore",
    "BlobStoreError",
    "LocalBlobStore",
    "SessionRepository",
    "InMemoryTeamMemberRepository",
    "SqlTeamMemberRepository",
    "TeamMemberRepository",
]

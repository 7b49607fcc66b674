# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Team member management, business logic for CRUD operations.
Sequences upload validation, blob writes and record persistence so that a
member's profile_image and the blob store do not diverge.

Update ordering: the new image is validated and stored first, then the old
blob is deleted, then the record is written. A crash between the last two
steps leaves the new blob orphaned and the record pointing at the removed
old path; that window is accepted (no transaction spans both stores).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Optional

from app.core.exceptions import UploadFailed
from app.core.logging import get_logger
from app.metrics import BLOB_CLEANUP_FAILURES, MEMBERS_TOTAL
from app.models.domain import (
    AcceptedUpload,
    TeamMember,
    TeamMemberFields,
    UploadCandidate,
    UploadError,
)
from app.repositories.blob_store import BlobStore
from app.repositories.team_member_repository import TeamMemberRepository
from app.services.upload_validator import UploadValidator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TeamMemberService:
    """Business logic for team member profiles."""

    def __init__(
        self,
        repo: TeamMemberRepository,
        blob_store: BlobStore,
        validator: Optional[UploadValidator] = None,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repo = repo
        self._blobs = blob_store
        self._log = logger or get_logger(__name__)
        self._validator = validator or UploadValidator(blob_store, logger=self._log)
        self._clock = clock

    # ── Commands ──

    def create(
        self,
        fields: TeamMemberFields | Mapping[str, Any],
        upload: Optional[UploadCandidate] = None,
    ) -> TeamMember:
        """Create a member. Raises FieldValidationError / UploadFailed; nothing is written on failure."""
        fields = self._parse(fields)
        profile_image = None
        if upload is not None:
            profile_image = self._store_upload(upload).path

        try:
            member = self._repo.create(fields, profile_image, self._clock())
        except Exception:
            if profile_image:
                self._cleanup(profile_image, reason="record write failed")
            raise

        MEMBERS_TOTAL.set(self._repo.count())
        self._log.info("Team member created id=%s image=%s", member.id, profile_image)
        return member

    def update(
        self,
        member_id: str,
        fields: TeamMemberFields | Mapping[str, Any],
        upload: Optional[UploadCandidate] = None,
    ) -> TeamMember:
        """Replace a member's editable fields; the image changes only when a new upload is given."""
        current = self._repo.get(member_id)
        fields = self._parse(fields)

        profile_image = current.profile_image
        if upload is not None:
            profile_image = self._store_upload(upload).path
            if current.profile_image:
                self._cleanup(current.profile_image, reason="image replaced")

        now = self._clock()
        if now <= current.updated_at:
            now = current.updated_at + timedelta(microseconds=1)

        try:
            member = self._repo.update(member_id, fields, profile_image, now)
        except Exception:
            if upload is not None and profile_image:
                self._cleanup(profile_image, reason="record write failed")
            raise
        self._log.info(
            "Team member updated id=%s image_replaced=%s", member_id, upload is not None,
        )
        return member

    def delete(self, member_id: str) -> None:
        """Delete a member and its image. Image removal is best-effort."""
        member = self._repo.get(member_id)
        if member.profile_image:
            self._cleanup(member.profile_image, reason="member deleted")
        self._repo.delete(member_id)
        MEMBERS_TOTAL.set(self._repo.count())
        self._log.info("Team member deleted id=%s", member_id)

    # ── Queries ──

    def list(self) -> list[TeamMember]:
        return self._repo.list_recent()

    def get(self, member_id: str) -> TeamMember:
        return self._repo.get(member_id)

    def count(self) -> int:
        return self._repo.count()

    # ── Helpers ──

    @staticmethod
    def _parse(fields: TeamMemberFields | Mapping[str, Any]) -> TeamMemberFields:
        if isinstance(fields, TeamMemberFields):
            return fields
        return TeamMemberFields.parse(fields)

    def _store_upload(self, upload: UploadCandidate) -> AcceptedUpload:
        result = self._validator.validate(upload)
        if isinstance(result, UploadError):
            raise UploadFailed(result)
        return result

    def _cleanup(self, path: str, reason: str) -> None:
        try:
            removed = self._blobs.delete(path)
        except Exception as exc:
            BLOB_CLEANUP_FAILURES.inc()
            self._log.warning("Blob cleanup failed path=%s reason=%s error=%s", path, reason, exc)
            return
        if not removed:
            self._log.info("Blob already absent path=%s reason=%s", path, reason)

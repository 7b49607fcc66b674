# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Team member data access.
Pure CRUD over a document collection keyed by opaque id: NO business rules here.
Two backends: an in-memory document store and a SQLAlchemy table.
"""

import itertools
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, delete, func, insert, select, text, update
from sqlalchemy.engine import Engine

from app.core.exceptions import TeamMemberNotFound
from app.core.logging import get_logger
from app.models.domain import TeamMember, TeamMemberFields

logger = get_logger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class TeamMemberRepository(Protocol):
    def create(self, fields: TeamMemberFields, profile_image: Optional[str],
               timestamp: datetime) -> TeamMember: ...

    def get(self, member_id: str) -> TeamMember: ...

    def update(self, member_id: str, fields: TeamMemberFields, profile_image: Optional[str],
               timestamp: datetime) -> TeamMember: ...

    def delete(self, member_id: str) -> None: ...

    def list_recent(self) -> list[TeamMember]: ...

    def count(self) -> int: ...

    def verify_connection(self) -> None: ...


class InMemoryTeamMemberRepository:
    """In-memory document storage."""

    def __init__(self) -> None:
        self._store: dict[str, dict[str, Any]] = {}
        self._seq = itertools.count()
        self._lock = threading.Lock()

    # ── Read ──

    def get(self, member_id: str) -> TeamMember:
        with self._lock:
            doc = self._store.get(member_id)
        if doc is None:
            raise TeamMemberNotFound(member_id)
        return _doc_to_member(doc)

    def list_recent(self) -> list[TeamMember]:
        with self._lock:
            docs = sorted(
                self._store.values(),
                key=lambda d: (d["created_at"], d["_seq"]),
                reverse=True,
            )
        return [_doc_to_member(d) for d in docs]

    def count(self) -> int:
        return len(self._store)

    def verify_connection(self) -> None:
        return None

    # ── Write ──

    def create(self, fields: TeamMemberFields, profile_image: Optional[str],
               timestamp: datetime) -> TeamMember:
        doc = {
            "id": _new_id(),
            **fields.model_dump(),
            "profile_image": profile_image,
            "created_at": timestamp,
            "updated_at": timestamp,
        }
        with self._lock:
            doc["_seq"] = next(self._seq)
            self._store[doc["id"]] = doc
        return _doc_to_member(doc)

    def update(self, member_id: str, fields: TeamMemberFields, profile_image: Optional[str],
               timestamp: datetime) -> TeamMember:
        with self._lock:
            doc = self._store.get(member_id)
            if doc is None:
                raise TeamMemberNotFound(member_id)
            doc.update(fields.model_dump())
            doc["profile_image"] = profile_image
            doc["updated_at"] = timestamp
            snapshot = dict(doc)
        return _doc_to_member(snapshot)

    def delete(self, member_id: str) -> None:
        with self._lock:
            if self._store.pop(member_id, None) is None:
                raise TeamMemberNotFound(member_id)

    # ── Bulk / internal ──

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


def _doc_to_member(doc: dict[str, Any]) -> TeamMember:
    return TeamMember(**{k: v for k, v in doc.items() if not k.startswith("_")})


# ── SQL backend ──

metadata = MetaData()

team_members = Table(
    "team_members",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=False),
    Column("profile_image", String(512), nullable=True),
    Column("telegram_link", String(255), nullable=True),
    Column("facebook_link", String(255), nullable=True),
    Column("phone_number", String(20), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, index=True),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _row_to_member(row) -> TeamMember:
    data = dict(row._mapping)
    data["created_at"] = _as_utc(data["created_at"])
    data["updated_at"] = _as_utc(data["updated_at"])
    return TeamMember(**data)


class SqlTeamMemberRepository:
    """Team member storage in a single SQL table."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def ensure_schema(self) -> None:
        metadata.create_all(self._engine)
        logger.info("Schema ready table=team_members dialect=%s", self._engine.dialect.name)

    # ── Write ──

    def create(self, fields: TeamMemberFields, profile_image: Optional[str],
               timestamp: datetime) -> TeamMember:
        values = {
            "id": _new_id(),
            **fields.model_dump(),
            "profile_image": profile_image,
            "created_at": timestamp,
            "updated_at": timestamp,
        }
        with self._engine.begin() as conn:
            conn.execute(insert(team_members).values(**values))
        return TeamMember(**values)

    def update(self, member_id: str, fields: TeamMemberFields, profile_image: Optional[str],
               timestamp: datetime) -> TeamMember:
        with self._engine.begin() as conn:
            result = conn.execute(
                update(team_members)
                .where(team_members.c.id == member_id)
                .values(**fields.model_dump(), profile_image=profile_image, updated_at=timestamp)
            )
            if result.rowcount == 0:
                raise TeamMemberNotFound(member_id)
            row = conn.execute(
                select(team_members).where(team_members.c.id == member_id)
            ).fetchone()
        return _row_to_member(row)

    def delete(self, member_id: str) -> None:
        with self._engine.begin() as conn:
            result = conn.execute(delete(team_members).where(team_members.c.id == member_id))
        if result.rowcount == 0:
            raise TeamMemberNotFound(member_id)

    # ── Read ──

    def get(self, member_id: str) -> TeamMember:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(team_members).where(team_members.c.id == member_id)
            ).fetchone()
        if row is None:
            raise TeamMemberNotFound(member_id)
        return _row_to_member(row)

    def list_recent(self) -> list[TeamMember]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(team_members).order_by(team_members.c.created_at.desc())
            ).fetchall()
        return [_row_to_member(r) for r in rows]

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(team_members)).scalar() or 0

    def verify_connection(self) -> None:
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self._engine.dispose()

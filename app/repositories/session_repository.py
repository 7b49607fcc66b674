# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Admin session data access.
In-memory store of session payloads with a per-entry expiry.
"""

import threading
import time
from typing import Any, Optional


class SessionRepository:
    """In-memory session storage."""

    def __init__(self) -> None:
        self._store: dict[str, tuple[float, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    # ── Read ──

    def get(self, session_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            entry = self._store.get(session_id)
            if entry is None:
                return None
            expires_at, payload = entry
            if expires_at <= time.monotonic():
                del self._store[session_id]
                return None
            return payload

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def save(self, session_id: str, payload: dict[str, Any], ttl_seconds: int) -> None:
        now = time.monotonic()
        with self._lock:
            self._purge_expired(now)
            self._store[session_id] = (now + ttl_seconds, payload)

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._store.pop(session_id, None)

    # ── Bulk / internal ──

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def _purge_expired(self, now: float) -> None:
        # caller holds the lock
        for sid in [sid for sid, (expires_at, _) in self._store.items() if expires_at <= now]:
            del self._store[sid]

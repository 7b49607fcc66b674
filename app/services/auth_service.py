# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Authentication service: admin credential check and cookie sessions with flash messages."""
import secrets
import uuid
from typing import Any, Optional

from app.core.config import settings
from app.core.logging import get_logger
from app.repositories.session_repository import SessionRepository

logger = get_logger(__name__)


class InvalidCredentials(Exception):
    pass


class AuthService:
    def __init__(self, sessions: SessionRepository, credentials: Optional[dict[str, str]] = None,
                 ttl_seconds: int = settings.SESSION_TTL_SECONDS):
        self._sessions = sessions
        self._credentials = settings.USER_CREDENTIALS if credentials is None else credentials
        self._ttl = ttl_seconds

    def login(self, username: str, password: str) -> str:
        """Check credentials and open a session. Returns the new session id."""
        expected = self._credentials.get(username)
        if not username or not password or expected is None \
                or not secrets.compare_digest(expected.encode(), password.encode()):
            logger.warning("Admin login failed username=%s", username)
            raise InvalidCredentials("These credentials do not match our records.")
        session_id = uuid.uuid4().hex
        self._sessions.save(session_id, {"username": username, "flash": None}, self._ttl)
        logger.info("Admin login username=%s", username)
        return session_id

    def logout(self, session_id: Optional[str]) -> None:
        if session_id:
            self._sessions.delete(session_id)

    def current_user(self, session_id: Optional[str]) -> Optional[str]:
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        return session["username"] if session else None

    def flash(self, session_id: str, message: str) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session["flash"] = message

    def pop_flash(self, session_id: str) -> Optional[str]:
        session: Optional[dict[str, Any]] = self._sessions.get(session_id)
        if session is None:
            return None
        message, session["flash"] = session.get("flash"), None
        return message

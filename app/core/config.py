# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration: all env-driven, read once at import.
Single source of truth for every tunable parameter.
"""

import os
import re

_SIZE_RE = re.compile(r"\s*(\d+)\s*([kmg])?", re.IGNORECASE)


def convert_to_bytes(size: str) -> int:
    """Convert a php.ini-style size string ("32M", "512k", "1G", "2048") to bytes.

    Parsed leniently like php.ini: leading digits plus an optional K/M/G right
    after them; anything else is ignored ("32MB" is 32M, "abc" is 0).
    """
    match = _SIZE_RE.match(size or "")
    if not match:
        return 0
    multiplier = {"k": 1024, "m": 1024 ** 2, "g": 1024 ** 3}.get((match.group(2) or "").lower(), 1)
    return int(match.group(1)) * multiplier


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "team-directory")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Record store
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    # Blob store
    STORAGE_ROOT: str = os.getenv("STORAGE_ROOT", "storage/public")
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")

    # Uploads
    UPLOAD_MAX_FILESIZE: str = os.getenv("UPLOAD_MAX_FILESIZE", "32M")
    POST_MAX_SIZE: str = os.getenv("POST_MAX_SIZE", "40M")
    MAX_IMAGE_KB: int = int(os.getenv("MAX_IMAGE_KB", "30720"))

    # Admin auth
    _raw_users: str = os.getenv("AUTH_USERS", "admin:admin")
    USER_CREDENTIALS: dict = {}
    for pair in _raw_users.split(","):
        pair = pair.strip()
        if ":" in pair:
            u, p = pair.split(":", 1)
            USER_CREDENTIALS[u.strip()] = p.strip()
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "team_admin_session")
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "28800"))
    SESSION_COOKIE_SECURE: bool = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")

    @property
    def upload_max_bytes(self) -> int:
        return convert_to_bytes(self.UPLOAD_MAX_FILESIZE)

    @property
    def post_max_bytes(self) -> int:
        return convert_to_bytes(self.POST_MAX_SIZE)


settings = Settings()

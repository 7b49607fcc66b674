# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Shared pytest setup: environment is pinned BEFORE any app module is imported,
since settings are read once at import.
"""
import io
import os
import shutil
import tempfile
from pathlib import Path

import pytest

# ── Environment before import ────────────────────────────────────────────
STORAGE_ROOT = tempfile.mkdtemp(prefix="team-directory-storage-")
os.environ["DATABASE_URL"] = ""
os.environ["STORAGE_ROOT"] = STORAGE_ROOT
os.environ["PUBLIC_BASE_URL"] = ""
os.environ["AUTH_USERS"] = "admin:secret"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from PIL import Image  # noqa: E402

from app.core.dependencies import get_session_repo, get_team_member_repo  # noqa: E402


@pytest.fixture(autouse=True)
def reset_state():
    """Empty the record store, sessions and blob directory around every test."""
    get_team_member_repo().clear()
    get_session_repo().clear()
    shutil.rmtree(STORAGE_ROOT, ignore_errors=True)
    Path(STORAGE_ROOT).mkdir(parents=True, exist_ok=True)
    yield


# ── Image helpers ────────────────────────────────────────────────────────
def make_image(fmt: str = "PNG", size: tuple[int, int] = (64, 48), color: str = "teal") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def stored_blobs() -> list[str]:
    """Relative paths of every blob currently on disk."""
    root = Path(STORAGE_ROOT)
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


@pytest.fixture
def png_bytes() -> bytes:
    return make_image("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image("JPEG", size=(80, 80), color="orange")

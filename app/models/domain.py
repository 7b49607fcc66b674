# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models: pure data structures, NO FastAPI dependency.
"""

from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator

from app.core.exceptions import FieldValidationError

TEAM_MEMBER_FIELDS = (
    "name", "title", "description", "telegram_link", "facebook_link", "phone_number",
)

_http_url = TypeAdapter(HttpUrl)


# ── Team members ──

class TeamMemberFields(BaseModel):
    """The editable field set of a team member, validated as one unit."""

    name: str = Field(..., min_length=1, max_length=255)
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    telegram_link: Optional[str] = Field(default=None, max_length=255)
    facebook_link: Optional[str] = Field(default=None, max_length=255)
    phone_number: Optional[str] = Field(default=None, max_length=20)

    @field_validator("*", mode="before")
    @classmethod
    def empty_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("telegram_link", "facebook_link")
    @classmethod
    def check_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            _http_url.validate_python(v)
        except ValidationError:
            raise ValueError("invalid url")
        return v

    @classmethod
    def parse(cls, raw: Mapping[str, Any]) -> "TeamMemberFields":
        """Validate a raw field mapping; raise FieldValidationError with per-field messages."""
        data = {k: raw.get(k) for k in TEAM_MEMBER_FIELDS if k in raw}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise FieldValidationError(_describe_errors(exc)) from exc


class TeamMember(BaseModel):
    """A persisted team member profile."""

    id: str
    name: str
    title: str
    description: str
    profile_image: Optional[str] = None
    telegram_link: Optional[str] = None
    facebook_link: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime


def _describe_errors(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__root__"
        if field in errors:
            continue
        label = field.replace("_", " ")
        kind = err["type"]
        ctx = err.get("ctx") or {}
        if kind == "missing" or (kind == "string_type" and err.get("input") is None):
            errors[field] = f"The {label} field is required."
        elif kind == "string_too_long":
            errors[field] = f"The {label} field must not be greater than {ctx.get('max_length')} characters."
        elif kind == "string_too_short":
            errors[field] = f"The {label} field is required."
        elif kind == "string_type":
            errors[field] = f"The {label} field must be a string."
        elif kind == "value_error" and field in ("telegram_link", "facebook_link"):
            errors[field] = f"The {label} field must be a valid URL."
        else:
            errors[field] = f"The {label} field is invalid."
    return errors


# ── Uploads ──

class UploadErrorCode(IntEnum):
    """Transport-level upload status codes (the conventional UPLOAD_ERR_* values)."""

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8


class UploadCandidate(BaseModel):
    """An incoming, not-yet-validated uploaded file."""

    model_config = ConfigDict(frozen=True)

    filename: Optional[str] = None
    content: bytes = b""
    content_type: Optional[str] = None
    size: int = 0
    error: UploadErrorCode = UploadErrorCode.OK

    @classmethod
    def from_bytes(cls, content: bytes, filename: Optional[str] = None,
                   content_type: Optional[str] = None) -> "UploadCandidate":
        return cls(filename=filename, content=content, content_type=content_type, size=len(content))

    @property
    def is_valid(self) -> bool:
        return self.error == UploadErrorCode.OK


class UploadErrorKind(str, Enum):
    INVALID_FILE = "invalid_file"
    TOO_LARGE = "too_large"
    UNSUPPORTED_TYPE = "unsupported_type"
    STORAGE_WRITE_FAILED = "storage_write_failed"
    UPLOAD_INTERNAL_ERROR = "upload_internal_error"


class UploadError(BaseModel):
    """A classified upload rejection."""

    model_config = ConfigDict(frozen=True)

    kind: UploadErrorKind
    message: str
    code: Optional[str] = None

    @property
    def status_code(self) -> int:
        if self.kind in (UploadErrorKind.STORAGE_WRITE_FAILED, UploadErrorKind.UPLOAD_INTERNAL_ERROR):
            return 500
        return 422


class AcceptedUpload(BaseModel):
    """A validated upload that has been written to the blob store."""

    model_config = ConfigDict(frozen=True)

    path: str
    mime_type: str
    size: int
    width: Optional[int] = None
    height: Optional[int] = None

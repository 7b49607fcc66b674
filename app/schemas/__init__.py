# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas: used only at the HTTP boundary."""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from app.models.domain import TeamMember


class TeamMemberOut(BaseModel):
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


class TeamMemberListResponse(BaseModel):
    success: bool = True
    data: List[TeamMemberOut]


class TeamMemberResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: TeamMemberOut


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[Dict[str, str]] = None


def image_url(path: Optional[str], base_url: str) -> Optional[str]:
    """Absolute public URL for a stored blob path."""
    if not path:
        return None
    return f"{base_url.rstrip('/')}/storage/{path}"


def to_public(member: TeamMember, base_url: str) -> TeamMemberOut:
    data = member.model_dump()
    data["profile_image"] = image_url(member.profile_image, base_url)
    return TeamMemberOut(**data)

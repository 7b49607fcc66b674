# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Public team member API.
Thin HTTP layer: delegates ALL logic to TeamMemberService.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.controllers.intake import read_submission
from app.core.config import settings
from app.core.dependencies import get_team_member_service
from app.core.exceptions import FieldValidationError, TeamMemberNotFound, UploadFailed
from app.schemas import (
    ErrorResponse,
    MessageResponse,
    TeamMemberListResponse,
    TeamMemberResponse,
    to_public,
)
from app.services.team_member_service import TeamMemberService

router = APIRouter(prefix="/api", tags=["Team Members"])

NOT_FOUND_MESSAGE = "Team member not found."


def public_base_url(request: Request) -> str:
    return settings.PUBLIC_BASE_URL or str(request.base_url)


def _error(status_code: int, message: str, errors: Optional[dict[str, str]] = None) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.get("/team-members", response_model=TeamMemberListResponse)
def list_team_members(
    request: Request,
    service: TeamMemberService = Depends(get_team_member_service),
):
    """All team members, newest first."""
    base_url = public_base_url(request)
    return TeamMemberListResponse(data=[to_public(m, base_url) for m in service.list()])


@router.get("/team-members/{member_id}", response_model=TeamMemberResponse)
def get_team_member(
    member_id: str,
    request: Request,
    service: TeamMemberService = Depends(get_team_member_service),
):
    try:
        member = service.get(member_id)
    except TeamMemberNotFound:
        return _error(404, NOT_FOUND_MESSAGE)
    return TeamMemberResponse(data=to_public(member, public_base_url(request)))


@router.post("/team-members", status_code=201, response_model=TeamMemberResponse)
async def create_team_member(
    request: Request,
    service: TeamMemberService = Depends(get_team_member_service),
):
    """Create from a multipart form (with optional profile_image) or a JSON body."""
    fields, upload = await read_submission(request)
    try:
        member = await run_in_threadpool(service.create, fields, upload)
    except FieldValidationError as exc:
        return _error(422, str(exc), exc.errors)
    except UploadFailed as exc:
        return _error(exc.error.status_code, exc.error.message)
    return TeamMemberResponse(
        message="Team member created successfully.",
        data=to_public(member, public_base_url(request)),
    )


@router.put("/team-members/{member_id}", response_model=TeamMemberResponse)
async def update_team_member(
    member_id: str,
    request: Request,
    service: TeamMemberService = Depends(get_team_member_service),
):
    """Replace the editable fields; the image is kept unless a new one is uploaded."""
    fields, upload = await read_submission(request)
    try:
        member = await run_in_threadpool(service.update, member_id, fields, upload)
    except TeamMemberNotFound:
        return _error(404, NOT_FOUND_MESSAGE)
    except FieldValidationError as exc:
        return _error(422, str(exc), exc.errors)
    except UploadFailed as exc:
        return _error(exc.error.status_code, exc.error.message)
    return TeamMemberResponse(
        message="Team member updated successfully.",
        data=to_public(member, public_base_url(request)),
    )


@router.delete("/team-members/{member_id}", response_model=MessageResponse)
def delete_team_member(
    member_id: str,
    service: TeamMemberService = Depends(get_team_member_service),
):
    try:
        service.delete(member_id)
    except TeamMemberNotFound:
        return _error(404, NOT_FOUND_MESSAGE)
    return MessageResponse(message="Team member deleted successfully.")

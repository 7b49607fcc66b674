# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Admin dashboard pages and form handling.
Same validation and upload contract as the API; failures re-render the form
with field errors, successes redirect to the list with a flash message.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from starlette.responses import HTMLResponse, RedirectResponse

from app.controllers.intake import read_submission
from app.controllers.team_member_controller import public_base_url
from app.core.config import settings
from app.core.dependencies import get_auth_service, get_team_member_service
from app.core.exceptions import FieldValidationError, TeamMemberNotFound, UploadFailed
from app.models.domain import TEAM_MEMBER_FIELDS
from app.services.auth_service import AuthService, InvalidCredentials
from app.services.team_member_service import TeamMemberService
from app.views import admin_pages

router = APIRouter(tags=["Admin"])

LIST_URL = "/admin/team-members"


def require_admin(request: Request, auth: AuthService = Depends(get_auth_service)) -> str:
    """Return the admin session id, or redirect to the login page."""
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if auth.current_user(session_id) is None:
        raise HTTPException(status_code=303, detail="Login required", headers={"Location": "/login"})
    return session_id


def _redirect_with_flash(auth: AuthService, session_id: str, message: str) -> RedirectResponse:
    auth.flash(session_id, message)
    return RedirectResponse(LIST_URL, status_code=303)


def _form_values(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: fields.get(k) for k in TEAM_MEMBER_FIELDS}


# ── Login ──

@router.get("/login", response_class=HTMLResponse)
def show_login(request: Request, auth: AuthService = Depends(get_auth_service)):
    if auth.current_user(request.cookies.get(settings.SESSION_COOKIE_NAME)):
        return RedirectResponse(LIST_URL, status_code=303)
    return HTMLResponse(admin_pages.login_page())


@router.post("/login")
async def login(request: Request, auth: AuthService = Depends(get_auth_service)):
    form = await request.form()
    username = str(form.get("username", "")).strip()
    password = str(form.get("password", ""))
    try:
        session_id = auth.login(username, password)
    except InvalidCredentials as exc:
        return HTMLResponse(admin_pages.login_page(str(exc), username), status_code=401)
    response = RedirectResponse(LIST_URL, status_code=303)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
        max_age=settings.SESSION_TTL_SECONDS,
    )
    return response


@router.post("/logout")
def logout(request: Request, auth: AuthService = Depends(get_auth_service)):
    auth.logout(request.cookies.get(settings.SESSION_COOKIE_NAME))
    response = RedirectResponse("/login", status_code=303)
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
    return response


# ── Team members ──

@router.get(LIST_URL, response_class=HTMLResponse)
def index(
    request: Request,
    session_id: str = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
    service: TeamMemberService = Depends(get_team_member_service),
):
    return admin_pages.list_page(service.list(), public_base_url(request), auth.pop_flash(session_id))


@router.get(LIST_URL + "/create", response_class=HTMLResponse)
def create_form(session_id: str = Depends(require_admin)):
    return admin_pages.form_page(values={})


@router.post(LIST_URL)
async def store(
    request: Request,
    session_id: str = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
    service: TeamMemberService = Depends(get_team_member_service),
):
    fields, upload = await read_submission(request)
    try:
        await run_in_threadpool(service.create, fields, upload)
    except FieldValidationError as exc:
        return _form_error(fields, exc.errors)
    except UploadFailed as exc:
        return _form_error(fields, {"profile_image": exc.error.message}, exc.error.status_code)
    return _redirect_with_flash(auth, session_id, "Team member created successfully.")


@router.get(LIST_URL + "/{member_id}/edit", response_class=HTMLResponse)
def edit_form(
    member_id: str,
    request: Request,
    session_id: str = Depends(require_admin),
    service: TeamMemberService = Depends(get_team_member_service),
):
    try:
        member = service.get(member_id)
    except TeamMemberNotFound:
        return HTMLResponse(admin_pages.not_found_page(), status_code=404)
    return admin_pages.form_page(member.model_dump(), member=member, base_url=public_base_url(request))


@router.post(LIST_URL + "/{member_id}")
async def update(
    member_id: str,
    request: Request,
    session_id: str = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
    service: TeamMemberService = Depends(get_team_member_service),
):
    fields, upload = await read_submission(request)
    if str(fields.get("_method", "")).upper() == "DELETE":
        return await run_in_threadpool(_destroy, member_id, session_id, auth, service)
    try:
        await run_in_threadpool(service.update, member_id, fields, upload)
    except TeamMemberNotFound:
        return HTMLResponse(admin_pages.not_found_page(), status_code=404)
    except FieldValidationError as exc:
        return _form_error(fields, exc.errors, member=_current(service, member_id), request=request)
    except UploadFailed as exc:
        return _form_error(
            fields, {"profile_image": exc.error.message}, exc.error.status_code,
            member=_current(service, member_id), request=request,
        )
    return _redirect_with_flash(auth, session_id, "Team member updated successfully.")


@router.post(LIST_URL + "/{member_id}/delete")
def destroy_via_form(
    member_id: str,
    session_id: str = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
    service: TeamMemberService = Depends(get_team_member_service),
):
    return _destroy(member_id, session_id, auth, service)


@router.delete(LIST_URL + "/{member_id}")
def destroy(
    member_id: str,
    session_id: str = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
    service: TeamMemberService = Depends(get_team_member_service),
):
    return _destroy(member_id, session_id, auth, service)


# ── Helpers ──

def _destroy(member_id: str, session_id: str, auth: AuthService, service: TeamMemberService):
    try:
        service.delete(member_id)
    except TeamMemberNotFound:
        return HTMLResponse(admin_pages.not_found_page(), status_code=404)
    return _redirect_with_flash(auth, session_id, "Team member deleted successfully.")


def _current(service: TeamMemberService, member_id: str):
    try:
        return service.get(member_id)
    except TeamMemberNotFound:
        return None


def _form_error(
    fields: dict[str, Any],
    errors: dict[str, str],
    status_code: int = 422,
    member=None,
    request: Optional[Request] = None,
) -> HTMLResponse:
    base_url = public_base_url(request) if request is not None else ""
    page = admin_pages.form_page(_form_values(fields), errors, member=member, base_url=base_url)
    return HTMLResponse(page, status_code=status_code)

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Team Directory Service: HTTP Tests
===================================
Run:  pytest test_main.py -v --cov=app --cov-report=term-missing
Covers the public JSON API, stored-image serving, system endpoints and the
admin dashboard. Environment and state reset live in conftest.py.
"""
from datetime import datetime
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from pydantic import TypeAdapter

from conftest import stored_blobs
from app.core.config import settings
from app.core.dependencies import get_team_member_repo
from app.repositories.blob_store import LocalBlobStore
from main import app

client = TestClient(app)

API = "/api/team-members"

ADA = {
    "name": "Ada Lovelace",
    "title": "Engineer",
    "description": "First programmer",
}


# ── Helpers ──────────────────────────────────────────────────────────────
def _create(fields=None, image=None, filename="ada.png", content_type="image/png"):
    data = dict(ADA if fields is None else fields)
    if image is None:
        return client.post(API, data=data)
    return client.post(API, data=data, files={"profile_image": (filename, image, content_type)})


def _storage_path(url: str) -> str:
    return url.split("/storage/", 1)[1]


_datetime = TypeAdapter(datetime)


def _ts(value: str) -> datetime:
    return _datetime.validate_python(value)


# ═══════════════════════════════════════════════════════════════════════════
# HEALTH & METRICS
# ═══════════════════════════════════════════════════════════════════════════
class TestHealth:
    def test_health_ok(self):
        r = client.get("/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "ok"
        assert data["service"] == settings.SERVICE_NAME
        assert data["version"] == settings.SERVICE_VERSION
        assert "timestamp" in data

    def test_ready_reports_record_store(self):
        _create()
        r = client.get("/health/ready")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "ready"
        assert data["record_store"] == "InMemoryTeamMemberRepository"
        assert data["team_members"] == 1

    def test_ready_503_when_store_unreachable(self):
        repo = get_team_member_repo()
        with patch.object(repo, "verify_connection", side_effect=RuntimeError("connection refused")):
            r = client.get("/health/ready")
        assert r.status_code == 503

    def test_metrics_exposed(self, png_bytes):
        _create(image=png_bytes)
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "team_directory_requests_total" in r.text
        assert 'team_directory_uploads_total{outcome="accepted"}' in r.text

    def test_request_id_propagated(self):
        r = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert r.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self):
        r = client.get("/health")
        assert r.headers.get("X-Request-ID")


# ═══════════════════════════════════════════════════════════════════════════
# CREATE
# ═══════════════════════════════════════════════════════════════════════════
class TestCreateTeamMember:
    def test_create_without_image(self):
        r = _create()
        assert r.status_code == 201
        body = r.json()
        assert body["success"] is True
        assert body["message"] == "Team member created successfully."
        data = body["data"]
        assert data["name"] == "Ada Lovelace"
        assert data["profile_image"] is None
        assert data["telegram_link"] is None
        assert data["created_at"] == data["updated_at"]
        assert len(data["id"]) == 32

    def test_create_from_json_body(self):
        r = client.post(API, json={**ADA, "phone_number": "+123456"})
        assert r.status_code == 201
        assert r.json()["data"]["phone_number"] == "+123456"

    def test_create_with_image_returns_absolute_url(self, png_bytes):
        r = _create(image=png_bytes)
        assert r.status_code == 201
        url = r.json()["data"]["profile_image"]
        assert url.startswith("http://testserver/storage/team-members/")
        assert url.endswith(".png")
        assert stored_blobs() == [_storage_path(url)]

    def test_stored_image_is_served_byte_identical(self, jpeg_bytes):
        url = _create(image=jpeg_bytes, filename="ada.jpg", content_type="image/jpeg").json()["data"]["profile_image"]
        assert url.endswith(".jpg")
        r = client.get(url)
        assert r.status_code == 200
        assert r.content == jpeg_bytes
        assert r.headers["content-type"] == "image/jpeg"

    def test_empty_optional_fields_become_null(self):
        r = _create({**ADA, "telegram_link": "", "facebook_link": "  ", "phone_number": ""})
        assert r.status_code == 201
        data = r.json()["data"]
        assert data["telegram_link"] is None
        assert data["facebook_link"] is None
        assert data["phone_number"] is None

    def test_missing_name_rejected(self):
        r = _create({"title": "Engineer", "description": "x"})
        assert r.status_code == 422
        body = r.json()
        assert body["success"] is False
        assert body["errors"]["name"] == "The name field is required."
        assert get_team_member_repo().count() == 0

    def test_multiple_field_errors_reported(self):
        r = _create({"name": "", "title": "", "description": "x"})
        assert r.status_code == 422
        body = r.json()
        assert set(body["errors"]) == {"name", "title"}
        assert body["message"] == "The name field is required. (and 1 more error)"

    def test_invalid_url_rejected(self):
        r = _create({**ADA, "telegram_link": "not a url"})
        assert r.status_code == 422
        assert r.json()["errors"]["telegram_link"] == "The telegram link field must be a valid URL."

    def test_phone_too_long_rejected(self):
        r = _create({**ADA, "phone_number": "1" * 21})
        assert r.status_code == 422
        assert "must not be greater than 20 characters" in r.json()["errors"]["phone_number"]

    def test_field_errors_leave_no_blob(self, png_bytes):
        r = _create({"title": "Engineer", "description": "x"}, image=png_bytes)
        assert r.status_code == 422
        assert stored_blobs() == []

    def test_text_file_rejected(self):
        r = _create(image=b"hello, world", filename="notes.txt", content_type="text/plain")
        assert r.status_code == 422
        body = r.json()
        assert body["message"] == "The file must be an image. Detected type: text/plain"
        assert "errors" not in body
        assert stored_blobs() == []
        assert get_team_member_repo().count() == 0

    def test_lying_content_type_rejected(self):
        r = _create(image=b"just some text", filename="fake.png", content_type="image/png")
        assert r.status_code == 422
        assert r.json()["message"] == "The file must be an image. Detected type: text/plain"

    def test_too_large_rejected(self):
        big = b"\0" * (31 * 1024 * 1024)
        r = _create(image=big, filename="big.png")
        assert r.status_code == 422
        assert r.json()["message"] == "The image is too large. Maximum size is 30MB."
        assert get_team_member_repo().count() == 0
        assert stored_blobs() == []

    def test_transport_limit_reported_as_invalid_file(self, monkeypatch, png_bytes):
        monkeypatch.setattr(settings, "UPLOAD_MAX_FILESIZE", "1K")
        r = _create(image=b"\0" * 4096, filename="big.png")
        assert r.status_code == 422
        assert r.json()["message"] == (
            "The uploaded file is not valid. Error code: 1. Upload limit is 1K."
            " Please increase UPLOAD_MAX_FILESIZE and POST_MAX_SIZE."
        )

    def test_lenient_size_setting_still_accepts_uploads(self, monkeypatch, png_bytes):
        monkeypatch.setattr(settings, "UPLOAD_MAX_FILESIZE", "32MB")
        r = _create(image=png_bytes)
        assert r.status_code == 201
        assert r.json()["data"]["profile_image"].endswith(".png")

    def test_form_max_file_size_reported(self, png_bytes):
        r = client.post(
            API,
            data={**ADA, "MAX_FILE_SIZE": "16"},
            files={"profile_image": ("ada.png", png_bytes, "image/png")},
        )
        assert r.status_code == 422
        assert r.json()["message"].startswith("The uploaded file is not valid. Error code: 2.")

    def test_storage_write_failure_is_500(self, png_bytes):
        with patch.object(LocalBlobStore, "put", return_value=""):
            r = _create(image=png_bytes)
        assert r.status_code == 500
        assert r.json()["message"] == "The profile image failed to upload. Please try again."
        assert get_team_member_repo().count() == 0

    def test_storage_exception_is_500(self, png_bytes):
        with patch.object(LocalBlobStore, "put", side_effect=OSError("disk full")):
            r = _create(image=png_bytes)
        assert r.status_code == 500
        assert r.json()["message"] == "The profile image failed to upload: disk full"

    def test_invalid_json_body(self):
        r = client.post(API, content=b"{not json", headers={"Content-Type": "application/json"})
        assert r.status_code == 400
        assert r.json() == {"success": False, "message": "Invalid JSON body"}

    def test_json_body_must_be_object(self):
        r = client.post(API, json=["Ada"])
        assert r.status_code == 400
        assert r.json()["message"] == "JSON body must be an object"


# ═══════════════════════════════════════════════════════════════════════════
# LIST / GET
# ═══════════════════════════════════════════════════════════════════════════
class TestListTeamMembers:
    def test_empty_list(self):
        r = client.get(API)
        assert r.status_code == 200
        assert r.json() == {"success": True, "data": []}

    def test_newest_first(self):
        for name in ("First", "Second", "Third"):
            _create({**ADA, "name": name})
        names = [m["name"] for m in client.get(API).json()["data"]]
        assert names == ["Third", "Second", "First"]

    def test_list_absolutizes_image_urls(self, png_bytes):
        _create(image=png_bytes)
        _create({**ADA, "name": "Grace"})
        data = client.get(API).json()["data"]
        assert data[0]["profile_image"] is None
        assert data[1]["profile_image"].startswith("http://testserver/storage/")

    def test_public_base_url_setting_used(self, monkeypatch, png_bytes):
        monkeypatch.setattr(settings, "PUBLIC_BASE_URL", "https://cdn.example.com")
        url = _create(image=png_bytes).json()["data"]["profile_image"]
        assert url.startswith("https://cdn.example.com/storage/team-members/")


class TestGetTeamMember:
    def test_get_existing(self):
        created = _create().json()["data"]
        r = client.get(f"{API}/{created['id']}")
        assert r.status_code == 200
        assert r.json()["data"] == created

    def test_get_unknown_404(self):
        r = client.get(f"{API}/does-not-exist")
        assert r.status_code == 404
        assert r.json() == {"success": False, "message": "Team member not found."}


# ═══════════════════════════════════════════════════════════════════════════
# UPDATE
# ═══════════════════════════════════════════════════════════════════════════
class TestUpdateTeamMember:
    def test_update_fields_keeps_image(self, png_bytes):
        created = _create(image=png_bytes).json()["data"]
        r = client.put(f"{API}/{created['id']}", data={**ADA, "title": "Mathematician"})
        assert r.status_code == 200
        body = r.json()
        assert body["message"] == "Team member updated successfully."
        assert body["data"]["title"] == "Mathematician"
        assert body["data"]["profile_image"] == created["profile_image"]
        assert body["data"]["created_at"] == created["created_at"]
        assert _ts(body["data"]["updated_at"]) > _ts(created["updated_at"])

    def test_update_from_json_body(self):
        created = _create().json()["data"]
        r = client.put(f"{API}/{created['id']}", json={**ADA, "name": "Augusta Ada King"})
        assert r.status_code == 200
        assert r.json()["data"]["name"] == "Augusta Ada King"

    def test_update_replaces_image_and_removes_old_blob(self, png_bytes, jpeg_bytes):
        created = _create(image=png_bytes).json()["data"]
        old_url = created["profile_image"]
        r = client.put(
            f"{API}/{created['id']}",
            data=ADA,
            files={"profile_image": ("new.jpg", jpeg_bytes, "image/jpeg")},
        )
        assert r.status_code == 200
        new_url = r.json()["data"]["profile_image"]
        assert new_url != old_url
        assert client.get(old_url).status_code == 404
        assert client.get(new_url).content == jpeg_bytes
        assert stored_blobs() == [_storage_path(new_url)]

    def test_rejected_upload_leaves_member_untouched(self, png_bytes):
        created = _create(image=png_bytes).json()["data"]
        r = client.put(
            f"{API}/{created['id']}",
            data={**ADA, "name": "Changed"},
            files={"profile_image": ("notes.txt", b"plain text", "text/plain")},
        )
        assert r.status_code == 422
        current = client.get(f"{API}/{created['id']}").json()["data"]
        assert current == created
        assert client.get(created["profile_image"]).content == png_bytes

    def test_too_large_upload_leaves_member_untouched(self, png_bytes):
        created = _create(image=png_bytes).json()["data"]
        r = client.put(
            f"{API}/{created['id']}",
            data={**ADA, "title": "Changed"},
            files={"profile_image": ("big.png", b"\0" * (31 * 1024 * 1024), "image/png")},
        )
        assert r.status_code == 422
        assert r.json()["message"] == "The image is too large. Maximum size is 30MB."
        assert client.get(f"{API}/{created['id']}").json()["data"] == created
        assert stored_blobs() == [_storage_path(created["profile_image"])]

    def test_field_errors_on_update(self):
        created = _create().json()["data"]
        r = client.put(f"{API}/{created['id']}", data={**ADA, "description": ""})
        assert r.status_code == 422
        assert r.json()["errors"]["description"] == "The description field is required."

    def test_update_unknown_404(self):
        r = client.put(f"{API}/missing", data=ADA)
        assert r.status_code == 404
        assert r.json()["message"] == "Team member not found."


# ═══════════════════════════════════════════════════════════════════════════
# DELETE
# ═══════════════════════════════════════════════════════════════════════════
class TestDeleteTeamMember:
    def test_delete_removes_record_and_blob(self, png_bytes):
        created = _create(image=png_bytes).json()["data"]
        r = client.delete(f"{API}/{created['id']}")
        assert r.status_code == 200
        assert r.json() == {"success": True, "message": "Team member deleted successfully."}
        assert client.get(f"{API}/{created['id']}").status_code == 404
        assert client.get(created["profile_image"]).status_code == 404
        assert stored_blobs() == []

    def test_delete_without_image(self):
        created = _create().json()["data"]
        assert client.delete(f"{API}/{created['id']}").status_code == 200
        assert client.get(API).json()["data"] == []

    def test_delete_unknown_404(self):
        r = client.delete(f"{API}/missing")
        assert r.status_code == 404
        assert r.json()["success"] is False

    def test_delete_succeeds_when_blob_removal_fails(self, png_bytes):
        created = _create(image=png_bytes).json()["data"]
        with patch.object(LocalBlobStore, "delete", side_effect=PermissionError("read-only")):
            r = client.delete(f"{API}/{created['id']}")
        assert r.status_code == 200
        assert client.get(f"{API}/{created['id']}").status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# STORAGE
# ═══════════════════════════════════════════════════════════════════════════
class TestStorage:
    def test_unknown_file_404(self):
        r = client.get("/storage/team-members/nothing.png")
        assert r.status_code == 404

    def test_escape_attempt_404(self):
        r = client.get("/storage/..%2F..%2Fetc%2Fpasswd")
        assert r.status_code == 404

    def test_svg_served_sandboxed(self):
        svg = b'<svg xmlns="http://www.w3.org/2000/svg"><script>fetch("/admin/team-members")</script></svg>'
        created = _create(image=svg, filename="avatar.svg", content_type="image/svg+xml")
        assert created.status_code == 201
        r = client.get(created.json()["data"]["profile_image"])
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("image/svg+xml")
        csp = r.headers["content-security-policy"]
        assert "default-src 'none'" in csp
        assert "sandbox" in csp

    def test_raster_images_carry_csp(self, png_bytes):
        url = _create(image=png_bytes).json()["data"]["profile_image"]
        r = client.get(url)
        assert "sandbox" in r.headers["content-security-policy"]
        assert r.headers["x-content-type-options"] == "nosniff"


# ═══════════════════════════════════════════════════════════════════════════
# ADMIN DASHBOARD
# ═══════════════════════════════════════════════════════════════════════════
@pytest.fixture
def admin():
    """A client holding a logged-in admin session cookie."""
    c = TestClient(app)
    r = c.post("/login", data={"username": "admin", "password": "secret"}, follow_redirects=False)
    assert r.status_code == 303
    return c


class TestAdminAuth:
    def test_dashboard_requires_login(self):
        c = TestClient(app)
        r = c.get("/admin/team-members", follow_redirects=False)
        assert r.status_code == 303
        assert r.headers["location"] == "/login"

    def test_login_page_renders(self):
        r = TestClient(app).get("/login")
        assert r.status_code == 200
        assert 'name="username"' in r.text

    def test_bad_credentials(self):
        c = TestClient(app)
        r = c.post("/login", data={"username": "admin", "password": "wrong"}, follow_redirects=False)
        assert r.status_code == 401
        assert "These credentials do not match our records." in r.text
        assert settings.SESSION_COOKIE_NAME not in r.cookies

    def test_login_sets_session_cookie(self):
        c = TestClient(app)
        r = c.post("/login", data={"username": "admin", "password": "secret"}, follow_redirects=False)
        assert r.status_code == 303
        assert r.headers["location"] == "/admin/team-members"
        assert settings.SESSION_COOKIE_NAME in r.cookies
        assert "httponly" in r.headers["set-cookie"].lower()

    def test_login_page_redirects_when_logged_in(self, admin):
        r = admin.get("/login", follow_redirects=False)
        assert r.status_code == 303

    def test_logout_ends_session(self, admin):
        r = admin.post("/logout", follow_redirects=False)
        assert r.status_code == 303
        r = admin.get("/admin/team-members", follow_redirects=False)
        assert r.status_code == 303


class TestAdminTeamMembers:
    def test_empty_list(self, admin):
        r = admin.get("/admin/team-members")
        assert r.status_code == 200
        assert "No team members yet." in r.text

    def test_create_form_renders(self, admin):
        r = admin.get("/admin/team-members/create")
        assert r.status_code == 200
        assert 'enctype="multipart/form-data"' in r.text

    def test_create_redirects_with_flash(self, admin, png_bytes):
        r = admin.post(
            "/admin/team-members",
            data=ADA,
            files={"profile_image": ("ada.png", png_bytes, "image/png")},
            follow_redirects=False,
        )
        assert r.status_code == 303
        assert r.headers["location"] == "/admin/team-members"
        page = admin.get("/admin/team-members").text
        assert "Team member created successfully." in page
        assert "Ada Lovelace" in page
        assert "http://testserver/storage/team-members/" in page
        # flash is shown once
        assert "Team member created successfully." not in admin.get("/admin/team-members").text

    def test_create_with_errors_rerenders_form(self, admin):
        r = admin.post("/admin/team-members", data={**ADA, "name": "", "title": "<b>Boss</b>"})
        assert r.status_code == 422
        assert "The name field is required." in r.text
        assert "&lt;b&gt;Boss&lt;/b&gt;" in r.text
        assert get_team_member_repo().count() == 0

    def test_create_with_bad_upload_rerenders_form(self, admin):
        r = admin.post(
            "/admin/team-members",
            data=ADA,
            files={"profile_image": ("notes.txt", b"plain text", "text/plain")},
        )
        assert r.status_code == 422
        assert "The file must be an image. Detected type: text/plain" in r.text

    def test_edit_form_prefilled(self, admin, png_bytes):
        created = _create(image=png_bytes).json()["data"]
        r = admin.get(f"/admin/team-members/{created['id']}/edit")
        assert r.status_code == 200
        assert 'value="Ada Lovelace"' in r.text
        assert "Current image" in r.text

    def test_edit_unknown_404(self, admin):
        r = admin.get("/admin/team-members/missing/edit")
        assert r.status_code == 404
        assert "Team member not found." in r.text

    def test_update_redirects_with_flash(self, admin):
        created = _create().json()["data"]
        r = admin.post(
            f"/admin/team-members/{created['id']}",
            data={**ADA, "title": "Countess"},
            follow_redirects=False,
        )
        assert r.status_code == 303
        assert "Team member updated successfully." in admin.get("/admin/team-members").text
        assert client.get(f"{API}/{created['id']}").json()["data"]["title"] == "Countess"

    def test_update_with_errors_keeps_record(self, admin):
        created = _create().json()["data"]
        r = admin.post(f"/admin/team-members/{created['id']}", data={**ADA, "facebook_link": "nope"})
        assert r.status_code == 422
        assert "The facebook link field must be a valid URL." in r.text
        assert client.get(f"{API}/{created['id']}").json()["data"] == created

    def test_delete_via_form(self, admin, png_bytes):
        created = _create(image=png_bytes).json()["data"]
        r = admin.post(f"/admin/team-members/{created['id']}/delete", follow_redirects=False)
        assert r.status_code == 303
        assert "Team member deleted successfully." in admin.get("/admin/team-members").text
        assert stored_blobs() == []

    def test_delete_via_method_override(self, admin):
        created = _create().json()["data"]
        r = admin.post(
            f"/admin/team-members/{created['id']}", data={"_method": "DELETE"}, follow_redirects=False,
        )
        assert r.status_code == 303
        assert get_team_member_repo().count() == 0

    def test_delete_verb(self, admin):
        created = _create().json()["data"]
        r = admin.delete(f"/admin/team-members/{created['id']}", follow_redirects=False)
        assert r.status_code == 303
        assert get_team_member_repo().count() == 0

    def test_delete_unknown_404(self, admin):
        r = admin.post("/admin/team-members/missing/delete", follow_redirects=False)
        assert r.status_code == 404

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Admin dashboard pages: server-rendered HTML strings.
Every interpolated value goes through `e()`.
"""
from html import escape
from typing import Any, Mapping, Optional, Sequence

from app.models.domain import TeamMember
from app.schemas import image_url

_STYLE = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
           background: #f9fafb; color: #111827; }
    header { background: #fff; border-bottom: 1px solid #e5e7eb; padding: 1rem 2rem;
             display: flex; justify-content: space-between; align-items: center; }
    header h1 { font-size: 1.5rem; }
    main { max-width: 60rem; margin: 2rem auto; padding: 0 1rem; }
    .card { background: #fff; border-radius: 0.5rem; box-shadow: 0 1px 3px rgba(0,0,0,.1); padding: 1.5rem; }
    .flash { background: #ecfdf5; color: #065f46; padding: .75rem 1rem; border-radius: .5rem; margin-bottom: 1rem; }
    .error { color: #dc2626; font-size: .875rem; margin-top: .25rem; }
    .field { margin-bottom: 1.25rem; }
    label { display: block; font-weight: 500; margin-bottom: .5rem; }
    input[type=text], input[type=url], input[type=password], textarea {
        width: 100%; padding: .5rem .75rem; border: 1px solid #d1d5db; border-radius: .5rem; }
    table { width: 100%; border-collapse: collapse; }
    th, td { text-align: left; padding: .75rem; border-bottom: 1px solid #e5e7eb; vertical-align: middle; }
    img.avatar { width: 48px; height: 48px; border-radius: 50%; object-fit: cover; }
    .btn { display: inline-block; padding: .5rem 1rem; border-radius: .5rem; border: 1px solid #d1d5db;
           background: #fff; color: #374151; text-decoration: none; cursor: pointer; font-size: .875rem; }
    .btn-primary { background: #2563eb; border-color: #2563eb; color: #fff; }
    .btn-danger { background: #dc2626; border-color: #dc2626; color: #fff; }
    .actions { display: flex; gap: .5rem; justify-content: flex-end; }
"""


def e(value: Any) -> str:
    return "" if value is None else escape(str(value), quote=True)


def _layout(title: str, body: str, header_links: str = "") -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{e(title)} - Admin Dashboard</title>
    <style>{_STYLE}</style>
</head>
<body>
    <header>
        <h1>{e(title)}</h1>
        <div class="actions">{header_links}</div>
    </header>
    <main>{body}</main>
</body>
</html>"""


_LOGOUT = """
        <form action="/logout" method="POST"><button class="btn" type="submit">Logout</button></form>"""

_BACK = '<a class="btn" href="/admin/team-members">&larr; Back to List</a>'


def _error_line(errors: Mapping[str, str], field: str) -> str:
    message = errors.get(field)
    return f'<p class="error">{e(message)}</p>' if message else ""


def login_page(error: Optional[str] = None, username: str = "") -> str:
    body = f"""
    <div class="card" style="max-width: 24rem; margin: 0 auto;">
        <form action="/login" method="POST">
            {f'<p class="error">{e(error)}</p>' if error else ''}
            <div class="field">
                <label for="username">Username</label>
                <input type="text" name="username" id="username" value="{e(username)}" required>
            </div>
            <div class="field">
                <label for="password">Password</label>
                <input type="password" name="password" id="password" required>
            </div>
            <div class="actions"><button class="btn btn-primary" type="submit">Login</button></div>
        </form>
    </div>"""
    return _layout("Admin Login", body)


def list_page(members: Sequence[TeamMember], base_url: str, flash: Optional[str] = None) -> str:
    rows = []
    for m in members:
        url = image_url(m.profile_image, base_url)
        avatar = f'<img class="avatar" src="{e(url)}" alt="{e(m.name)}">' if url else "&mdash;"
        rows.append(f"""
            <tr>
                <td>{avatar}</td>
                <td>{e(m.name)}</td>
                <td>{e(m.title)}</td>
                <td>{e(m.phone_number)}</td>
                <td>
                    <div class="actions">
                        <a class="btn" href="/admin/team-members/{e(m.id)}/edit">Edit</a>
                        <form action="/admin/team-members/{e(m.id)}/delete" method="POST"
                              onsubmit="return confirm('Delete this team member?');">
                            <button class="btn btn-danger" type="submit">Delete</button>
                        </form>
                    </div>
                </td>
            </tr>""")
    table = (
        "<table><thead><tr><th>Image</th><th>Name</th><th>Title</th><th>Phone</th><th></th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        if rows else "<p>No team members yet.</p>"
    )
    body = f"""
    {f'<div class="flash">{e(flash)}</div>' if flash else ''}
    <div class="card">{table}</div>"""
    links = '<a class="btn btn-primary" href="/admin/team-members/create">Add Team Member</a>' + _LOGOUT
    return _layout("Team Members", body, links)


def form_page(
    values: Mapping[str, Any],
    errors: Optional[Mapping[str, str]] = None,
    member: Optional[TeamMember] = None,
    base_url: str = "",
) -> str:
    errors = errors or {}
    editing = member is not None
    action = f"/admin/team-members/{e(member.id)}" if editing else "/admin/team-members"
    current = ""
    if editing and member.profile_image:
        current = (
            f'<p><img class="avatar" src="{e(image_url(member.profile_image, base_url))}" alt="">'
            " Current image. Upload a new one to replace it.</p>"
        )

    def text_input(field: str, label: str, kind: str = "text", required: bool = False,
                   placeholder: str = "") -> str:
        return f"""
            <div class="field">
                <label for="{field}">{label}{' *' if required else ''}</label>
                <input type="{kind}" name="{field}" id="{field}" value="{e(values.get(field))}"
                       placeholder="{e(placeholder)}"{' required' if required else ''}>
                {_error_line(errors, field)}
            </div>"""

    body = f"""
    <div class="card">
        <form action="{action}" method="POST" enctype="multipart/form-data">
            <div class="field">
                <label for="profile_image">Profile Image</label>
                {current}
                <input type="file" name="profile_image" id="profile_image" accept="image/*">
                {_error_line(errors, "profile_image")}
            </div>
            {text_input("name", "Name", required=True)}
            {text_input("title", "Title", required=True)}
            <div class="field">
                <label for="description">Description *</label>
                <textarea name="description" id="description" rows="4" required>{e(values.get("description"))}</textarea>
                {_error_line(errors, "description")}
            </div>
            {text_input("telegram_link", "Telegram Link", kind="url", placeholder="https://t.me/username")}
            {text_input("facebook_link", "Facebook Link", kind="url", placeholder="https://facebook.com/username")}
            {text_input("phone_number", "Phone Number", placeholder="+1234567890")}
            <div class="actions">
                <a class="btn" href="/admin/team-members">Cancel</a>
                <button class="btn btn-primary" type="submit">{'Update' if editing else 'Create'} Team Member</button>
            </div>
        </form>
    </div>"""
    title = "Edit Team Member" if editing else "Add Team Member"
    return _layout(title, body, _BACK + _LOGOUT)


def not_found_page() -> str:
    body = f'<div class="card"><p>Team member not found.</p><p style="margin-top:1rem">{_BACK}</p></div>'
    return _layout("404 Not Found", body)

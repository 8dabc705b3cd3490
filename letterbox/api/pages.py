"""
Server-rendered HTML pages.

Every interpolated value goes through ``escape``.
"""

from __future__ import annotations

from html import escape

from letterbox.api.flash import FlashMessage


def render_page(title: str, body: str) -> str:
    return f"""<!doctype html>
<html lang="en">
<head>
    <meta http-equiv="content-type" content="text/html; charset=utf-8">
    <title>{escape(title)}</title>
</head>
<body>
{body}
</body>
</html>"""


def render_flash(messages: list[FlashMessage]) -> str:
    return "".join(
        f'<p class="flash flash-{m.level.value}"><i>{escape(m.message)}</i></p>\n'
        for m in messages
    )


def home_page() -> str:
    return render_page("Home", "<p>Welcome to our newsletter!</p>")


def confirmed_page() -> str:
    return render_page(
        "Subscription confirmed",
        "<p>Thanks for confirming your subscription!</p>",
    )


def login_page(messages: list[FlashMessage]) -> str:
    return render_page(
        "Login",
        render_flash(messages)
        + """<form action="/login" method="post">
    <label>Username
        <input type="text" placeholder="Enter Username" name="username">
    </label>
    <label>Password
        <input type="password" placeholder="Enter Password" name="password">
    </label>
    <button type="submit">Login</button>
</form>""",
    )


def dashboard_page(username: str) -> str:
    return render_page(
        "Admin dashboard",
        f"""<p>Welcome {escape(username)}!</p>
<p>Available actions:</p>
<ol>
    <li><a href="/admin/password">Change password</a></li>
    <li><a href="/admin/newsletters">Send a newsletter issue</a></li>
    <li>
        <form name="logoutForm" action="/admin/logout" method="post">
            <input type="submit" value="Logout">
        </form>
    </li>
</ol>""",
    )


def password_page(messages: list[FlashMessage]) -> str:
    return render_page(
        "Change Password",
        render_flash(messages)
        + """<form action="/admin/password" method="post">
    <label>Current password
        <input type="password" placeholder="Enter current password" name="current_password">
    </label>
    <br>
    <label>New password
        <input type="password" placeholder="Enter new password" name="new_password">
    </label>
    <br>
    <label>Confirm new password
        <input type="password" placeholder="Type the new password again"
               name="new_password_confirmation">
    </label>
    <br>
    <button type="submit">Change password</button>
</form>
<p><a href="/admin/dashboard">&lt;- Back</a></p>""",
    )


def newsletter_page(messages: list[FlashMessage]) -> str:
    return render_page(
        "Publish Newsletter Issue",
        render_flash(messages)
        + """<form action="/admin/newsletters" method="post">
    <label>Title
        <input type="text" placeholder="Enter the issue title" name="title">
    </label>
    <br>
    <label>Plain text content
        <textarea placeholder="Enter the content in plain text" name="text_content"
                  rows="20" cols="50"></textarea>
    </label>
    <br>
    <label>HTML content
        <textarea placeholder="Enter the content in HTML format" name="html_content"
                  rows="20" cols="50"></textarea>
    </label>
    <br>
    <button type="submit">Publish</button>
</form>
<p><a href="/admin/dashboard">&lt;- Back</a></p>""",
    )

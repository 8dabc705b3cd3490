"""
Admin routes.

Every route here sits behind the access gate (router-level require_login).
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from letterbox.api.container import AppContainer
from letterbox.api.deps import get_container, get_session, require_login
from letterbox.api.flash import FlashLevel
from letterbox.api.pages import dashboard_page, newsletter_page, password_page
from letterbox.components.auth import TypedSession
from letterbox.components.newsletters import NewsletterIssue
from letterbox.core.errors import ValidationError

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_login)])

PASSWORD_CHANGED = "Your password has been changed."
ISSUE_PUBLISHED = "The newsletter issue has been published!"
LOGGED_OUT = "You have successfully logged out."


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(
    user_id: UUID = Depends(require_login),
    container: AppContainer = Depends(get_container),
) -> HTMLResponse:
    username = container.auth.get_username(user_id)
    return HTMLResponse(dashboard_page(username))


# --- Password ---


@router.get("/password", response_class=HTMLResponse)
def password_form(request: Request, container: AppContainer = Depends(get_container)) -> HTMLResponse:
    return container.flash.render(request, password_page)


@router.post("/password")
def change_password(
    current_password: str = Form(""),
    new_password: str = Form(""),
    new_password_confirmation: str = Form(""),
    user_id: UUID = Depends(require_login),
    container: AppContainer = Depends(get_container),
) -> RedirectResponse:
    try:
        container.auth.change_password(
            user_id, current_password, new_password, new_password_confirmation
        )
    except ValidationError as e:
        return container.flash.redirect("/admin/password", FlashLevel.ERROR, e.message)
    return container.flash.redirect("/admin/password", FlashLevel.INFO, PASSWORD_CHANGED)


# --- Newsletters ---


@router.get("/newsletters", response_class=HTMLResponse)
def newsletter_form(
    request: Request, container: AppContainer = Depends(get_container)
) -> HTMLResponse:
    return container.flash.render(request, newsletter_page)


@router.post("/newsletters")
def publish_newsletter(
    title: str = Form(""),
    html_content: str = Form(""),
    text_content: str = Form(""),
    container: AppContainer = Depends(get_container),
) -> RedirectResponse:
    container.newsletters.publish(
        NewsletterIssue(title=title, html_content=html_content, text_content=text_content)
    )
    return container.flash.redirect("/admin/newsletters", FlashLevel.INFO, ISSUE_PUBLISHED)


# --- Logout ---


@router.post("/logout")
def logout(
    container: AppContainer = Depends(get_container),
    session: TypedSession = Depends(get_session),
) -> RedirectResponse:
    container.auth.log_out(session)
    return container.flash.redirect("/login", FlashLevel.INFO, LOGGED_OUT)

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from letterbox.api.container import AppContainer
from letterbox.api.deps import get_container, get_session
from letterbox.api.flash import FlashLevel
from letterbox.api.pages import login_page
from letterbox.components.auth import TypedSession
from letterbox.core.errors import InvalidCredentials, UnexpectedError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request, container: AppContainer = Depends(get_container)) -> HTMLResponse:
    return container.flash.render(request, login_page)


@router.post("/login")
def login(
    username: str = Form(""),
    password: str = Form(""),
    container: AppContainer = Depends(get_container),
    session: TypedSession = Depends(get_session),
) -> RedirectResponse:
    try:
        container.auth.login(username, password, session)
    except InvalidCredentials as e:
        return container.flash.redirect("/login", FlashLevel.ERROR, e.message)
    except UnexpectedError as e:
        logger.error("Login failed unexpectedly: %s", e.message, exc_info=e)
        return container.flash.redirect("/login", FlashLevel.ERROR, "Something went wrong")

    return RedirectResponse("/admin/dashboard", status_code=303)

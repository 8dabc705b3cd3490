from uuid import UUID

from fastapi import Depends, Request

from letterbox.api.container import AppContainer
from letterbox.components.auth import TypedSession
from letterbox.core.errors import LoginRequired


def get_container(request: Request) -> AppContainer:
    container: AppContainer = request.app.state.container
    return container


def get_session(request: Request) -> TypedSession:
    session: TypedSession = request.state.session
    return session


def require_login(request: Request, session: TypedSession = Depends(get_session)) -> UUID:
    """
    Access gate for the admin area.

    Anonymous requests (no cookie, unknown, expired or destroyed session)
    raise LoginRequired before the handler runs.
    """
    user_id = session.get_user_id()
    if user_id is None:
        raise LoginRequired()
    request.state.user_id = user_id
    return user_id

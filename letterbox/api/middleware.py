"""
Session cookie middleware.

Binds a TypedSession to every request from the ``session_id`` cookie and,
after the handler ran, writes the cookie back if the session id changed
(first write, renewal) or deletes it if the session is gone.
"""

from __future__ import annotations

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from letterbox.components.auth import TypedSession
from letterbox.core.errors import UnexpectedError

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_id"


class SessionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        container = request.app.state.container
        cookie = request.cookies.get(SESSION_COOKIE)

        try:
            session = await run_in_threadpool(TypedSession.load, container.session_store, cookie)
        except UnexpectedError as e:
            logger.error("Failed to load session: %s", e.message, exc_info=e)
            return JSONResponse({"detail": "Something went wrong"}, status_code=500)

        request.state.session = session
        response = await call_next(request)

        if session.session_id is not None and session.session_id != cookie:
            response.set_cookie(
                SESSION_COOKIE,
                session.session_id,
                httponly=True,
                samesite="lax",
                secure=container.settings.session.cookie_secure,
            )
        elif session.session_id is None and cookie is not None:
            response.delete_cookie(SESSION_COOKIE, httponly=True, samesite="lax")
        return response

"""
One-time flash messages.

Messages travel in a short-lived HS256 JWT stored in the ``_flash`` cookie.
The next page that renders them deletes the cookie. A cookie that fails
signature or expiry checks reads as no messages.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse
from jose import JWTError, jwt

from letterbox.adapters.auth.session_store import TimePort
from letterbox.adapters.clock import SystemClock

logger = logging.getLogger(__name__)

FLASH_COOKIE = "_flash"
ALGORITHM = "HS256"
FLASH_TTL = timedelta(minutes=5)


class FlashLevel(str, Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class FlashMessage:
    level: FlashLevel
    message: str


class FlashCodec:
    def __init__(
        self,
        secret: str,
        ttl: timedelta = FLASH_TTL,
        clock: TimePort | None = None,
        secure_cookie: bool = False,
    ) -> None:
        self._secret = secret
        self.ttl = ttl
        self.secure_cookie = secure_cookie
        self._clock = clock or SystemClock()

    def encode(self, messages: list[FlashMessage]) -> str:
        expire: datetime = self._clock.now_utc() + self.ttl
        claims = {
            "messages": [{"level": m.level.value, "message": m.message} for m in messages],
            "exp": int(expire.timestamp()),
        }
        return str(jwt.encode(claims, self._secret, algorithm=ALGORITHM))

    def decode(self, token: str | None) -> list[FlashMessage]:
        if not token:
            return []
        try:
            claims = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except JWTError:
            logger.debug("Discarding flash cookie that failed verification")
            return []
        try:
            return [
                FlashMessage(FlashLevel(item["level"]), str(item["message"]))
                for item in claims.get("messages", [])
            ]
        except (KeyError, TypeError, ValueError):
            return []

    # --- Response helpers ---

    def redirect(self, url: str, level: FlashLevel, message: str) -> RedirectResponse:
        response = RedirectResponse(url, status_code=303)
        response.set_cookie(
            FLASH_COOKIE,
            self.encode([FlashMessage(level, message)]),
            max_age=int(self.ttl.total_seconds()),
            httponly=True,
            samesite="lax",
            secure=self.secure_cookie,
        )
        return response

    def render(
        self, request: Request, build: Callable[[list[FlashMessage]], str]
    ) -> HTMLResponse:
        """Render a page with any pending messages, then drop the cookie."""
        raw = request.cookies.get(FLASH_COOKIE)
        response = HTMLResponse(build(self.decode(raw)))
        if raw is not None:
            response.delete_cookie(FLASH_COOKIE, httponly=True, samesite="lax")
        return response

"""
Error taxonomy shared by all Letterbox components.

Components raise these; the HTTP boundary (letterbox.api.main) maps them
to status codes. Validation and credential errors travel unchanged.
Unexpected errors are wrapped with context at each layer crossing using
``raise UnexpectedError(...) from exc`` so the root cause stays inspectable.
"""

from __future__ import annotations


class LetterboxError(Exception):
    """Base Letterbox error."""

    pass


class ValidationError(LetterboxError):
    """Caller supplied bad input. Message is safe to show."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class InvalidCredentials(LetterboxError):
    """Username/password pair rejected. Never says which half was wrong."""

    def __init__(self, message: str = "Authentication failed") -> None:
        self.message = message
        super().__init__(message)


class Unauthorized(LetterboxError):
    """Missing or unknown confirmation token, or missing session."""

    def __init__(self, message: str = "Unauthorized") -> None:
        self.message = message
        super().__init__(message)


class LoginRequired(Unauthorized):
    """Raised by the access gate for anonymous requests to the admin area."""

    def __init__(self, login_path: str = "/login") -> None:
        self.login_path = login_path
        super().__init__("The user has not logged in")


class UnexpectedError(LetterboxError):
    """Downstream failure (persistence, mail transport, hashing)."""

    def __init__(self, message: str = "Something went wrong") -> None:
        self.message = message
        super().__init__(message)

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


def error_chain(error: BaseException) -> list[str]:
    """Render an exception and its causes, outermost first."""
    chain: list[str] = []
    current: BaseException | None = error
    while current is not None:
        chain.append(f"{type(current).__name__}: {current}")
        current = current.__cause__ or current.__context__
    return chain

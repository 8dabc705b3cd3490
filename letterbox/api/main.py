import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse, Response

from letterbox.adapters.auth.session_store import TimePort
from letterbox.adapters.sqlite.migrator import SQLiteMigrator
from letterbox.api.container import AppContainer
from letterbox.api.middleware import SessionMiddleware
from letterbox.api.routes import admin, health, home, login, subscriptions
from letterbox.app_shell.config import Settings
from letterbox.core.errors import (
    InvalidCredentials,
    LoginRequired,
    UnexpectedError,
    Unauthorized,
    ValidationError,
    error_chain,
)
from letterbox.core.ports.email import EmailSenderPort
from letterbox.services.bootstrap import bootstrap_operator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Apply migrations and create the first operator before serving."""
    container: AppContainer = app.state.container

    applied = SQLiteMigrator(container.settings.database.path).run_migrations()
    if applied:
        logger.info("Applied %d migrations", len(applied))
    bootstrap_operator(container.user_repo, container.verifier, container.settings.bootstrap)

    yield

    container.email_sender.close()


# --- Exception handlers ---


async def login_required_handler(request: Request, exc: Exception) -> Response:
    assert isinstance(exc, LoginRequired)
    return RedirectResponse(exc.login_path, status_code=303)


async def unauthorized_handler(request: Request, exc: Exception) -> Response:
    assert isinstance(exc, Unauthorized)
    return JSONResponse({"detail": exc.message}, status_code=401)


async def invalid_credentials_handler(request: Request, exc: Exception) -> Response:
    assert isinstance(exc, InvalidCredentials)
    return JSONResponse({"detail": exc.message}, status_code=401)


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    assert isinstance(exc, ValidationError)
    return JSONResponse({"detail": exc.message, "field": exc.field}, status_code=400)


async def request_validation_handler(request: Request, exc: Exception) -> Response:
    assert isinstance(exc, RequestValidationError)
    return JSONResponse(
        {"detail": "Malformed request", "errors": jsonable_encoder(exc.errors())},
        status_code=400,
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> Response:
    assert isinstance(exc, UnexpectedError)
    logger.error(
        "%s %s failed: %s",
        request.method,
        request.url.path,
        " <- ".join(error_chain(exc)),
        exc_info=exc,
    )
    return JSONResponse({"detail": "Something went wrong"}, status_code=500)


def create_app(
    settings: Settings,
    email_sender: EmailSenderPort | None = None,
    clock: TimePort | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Letterbox",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.container = AppContainer.create(settings, email_sender=email_sender, clock=clock)

    # --- Routers ---
    app.include_router(home.router)
    app.include_router(health.router)
    app.include_router(subscriptions.router)
    app.include_router(login.router)
    app.include_router(admin.router)

    app.add_middleware(SessionMiddleware)

    app.add_exception_handler(LoginRequired, login_required_handler)
    app.add_exception_handler(Unauthorized, unauthorized_handler)
    app.add_exception_handler(InvalidCredentials, invalid_credentials_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(UnexpectedError, unexpected_error_handler)

    return app

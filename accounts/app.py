"""FastAPI application factory for the accounts API."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from accounts.core.config import get_settings
from accounts.core.logging_config import setup_logging
from accounts.domain.errors import (
    AccountError,
    ConflictError,
    StoreUnavailable,
    UserNotFound,
    ValidationFailed,
)
from accounts.routers import users as users_router
from accounts.services.notifier import WelcomeNotifier
from accounts.services.user_service import UserService

logger = logging.getLogger(__name__)


def _status_for(exc: AccountError) -> int:
    if isinstance(exc, ConflictError):
        return 409
    if isinstance(exc, ValidationFailed):
        return 400
    if isinstance(exc, UserNotFound):
        return 404
    if isinstance(exc, StoreUnavailable):
        return 503
    return 500


async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    status = _status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"error": exc.message, "kind": getattr(exc, "kind", "error")}, status_code=status)


def create_app(user_service: Optional[UserService] = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``--factory accounts.app:create_app``)."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file or None)

    if user_service is None:
        notifier = WelcomeNotifier() if settings.welcome_email_enabled else None
        user_service = UserService(notifier=notifier)

    app = FastAPI(title="User Accounts API")
    app.state.user_service = user_service
    app.add_exception_handler(AccountError, account_error_handler)
    app.include_router(users_router.router)
    return app

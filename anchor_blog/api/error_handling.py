from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from anchor_blog.domain.exceptions import (
    CannotDemoteSelfError,
    ConflictError,
    DomainError,
    ExpiredTokenError,
    ExternalIdentityError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    NotificationDeliveryError,
    OneTimeTokenNotFoundError,
    RefreshTokenNotFoundError,
    RoleChangeError,
    StorageError,
    StorageTimeoutError,
    TokenAlreadyUsedError,
    TokenSigningError,
    UnauthorizedError,
    UserNotAdminError,
    ValidationFailedError,
)


logger = logging.getLogger(__name__)

# First match wins, so subclasses come before their bases.
_ERROR_TABLE: tuple[tuple[type[DomainError], int, str, str | None], ...] = (
    (OneTimeTokenNotFoundError, 400, "invalid_token", "Invalid or expired link."),
    (TokenAlreadyUsedError, 400, "invalid_token", "Invalid or expired link."),
    (ExpiredTokenError, 400, "invalid_token", "Invalid or expired link."),
    (RefreshTokenNotFoundError, 401, "unauthorized", "Invalid or expired token."),
    (NotFoundError, 404, "not_found", None),
    (InvalidCredentialsError, 401, "invalid_credentials", "Invalid username or password."),
    (InvalidTokenError, 401, "unauthorized", "Invalid or expired token."),
    (UnauthorizedError, 401, "unauthorized", "Invalid or expired token."),
    (ExternalIdentityError, 401, "unauthorized", "External sign-in failed."),
    (ForbiddenError, 403, "forbidden", None),
    (CannotDemoteSelfError, 400, "validation_error", None),
    (UserNotAdminError, 400, "validation_error", None),
    (RoleChangeError, 403, "forbidden", None),
    (ConflictError, 409, "conflict", None),
    (ValidationFailedError, 400, "validation_error", None),
    (StorageTimeoutError, 504, "timeout", "The request timed out, try again later."),
    (StorageError, 500, "server_error", "Internal server error."),
    (TokenSigningError, 500, "server_error", "Internal server error."),
    (NotificationDeliveryError, 502, "notification_failed", "Notification could not be delivered."),
)


def resolve_error(exc: DomainError) -> tuple[int, str, str]:
    """Status code, stable error code and client-facing message for a domain error."""
    for error_type, status_code, code, fixed_message in _ERROR_TABLE:
        if isinstance(exc, error_type):
            return status_code, code, fixed_message or str(exc)
    return 500, "server_error", "Internal server error."


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code, "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError):
        status_code, code, message = resolve_error(exc)
        if status_code >= 500:
            logger.error(
                "api: domain error path=%s method=%s status=%s type=%s error=%s",
                request.url.path,
                request.method,
                status_code,
                type(exc).__name__,
                exc,
                exc_info=exc,
            )
        else:
            logger.info(
                "api: domain error path=%s method=%s status=%s type=%s",
                request.url.path,
                request.method,
                status_code,
                type(exc).__name__,
            )
        return error_response(status_code, code, message)

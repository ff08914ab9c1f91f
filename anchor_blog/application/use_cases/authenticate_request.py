from __future__ import annotations

import logging
from typing import Iterable

from anchor_blog.application.dto.auth import AuthContext
from anchor_blog.application.ports.token_port import TokenPort
from anchor_blog.domain.entities.user import Role
from anchor_blog.domain.exceptions import (
    DomainError,
    ForbiddenError,
    InvalidTokenError,
    StorageError,
    TokenSigningError,
    UnauthorizedError,
)


logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def parse_bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Missing or malformed token.")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthorizedError("Token is required.")
    return token


class AuthenticateRequestUseCase:
    """Turns an Authorization header into the request's AuthContext."""

    def __init__(self, *, token_port: TokenPort):
        self._token_port = token_port

    def execute(self, *, authorization: str | None) -> AuthContext:
        token = parse_bearer_token(authorization)
        try:
            claims = self._token_port.decode_access_token(token=token)
        except InvalidTokenError as exc:
            logger.info("authenticate_request: invalid token error=%s", exc.__cause__ or exc)
            raise UnauthorizedError("Invalid or expired token.") from exc
        except (StorageError, TokenSigningError):
            raise
        except DomainError as exc:
            logger.warning("authenticate_request: token validation failed error=%s", exc)
            raise UnauthorizedError("Invalid or expired token.") from exc

        return AuthContext(user_id=claims.user_id, username=claims.username, role=claims.role)


def require_role(context: AuthContext, allowed: Iterable[Role]) -> AuthContext:
    allowed_roles = frozenset(allowed)
    if context.role not in allowed_roles:
        logger.info(
            "authenticate_request: forbidden user_id=%s role=%s required=%s",
            context.user_id,
            context.role.value,
            ",".join(sorted(role.value for role in allowed_roles)),
        )
        raise ForbiddenError("Insufficient permissions.")
    return context

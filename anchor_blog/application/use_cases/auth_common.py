from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from anchor_blog.application.dto.auth import AuthTokensOutput, AuthUserOutput
from anchor_blog.application.ports.refresh_token_port import RefreshTokenPort
from anchor_blog.application.ports.token_hasher_port import TokenHasherPort
from anchor_blog.application.ports.token_port import TokenPort
from anchor_blog.domain.entities.token import RefreshTokenRecord
from anchor_blog.domain.entities.user import User


Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_auth_user_output(user: User) -> AuthUserOutput:
    return AuthUserOutput(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        activated=user.activated,
    )


def issue_tokens(
    *,
    user: User,
    token_port: TokenPort,
    token_hasher: TokenHasherPort,
    refresh_token_port: RefreshTokenPort,
    now: datetime,
) -> AuthTokensOutput:
    access_token, access_expires_at = token_port.create_access_token(user=user, now=now)
    refresh_token, refresh_expires_at = token_port.create_refresh_token(user=user, now=now)
    refresh_token_port.store_refresh_token(
        RefreshTokenRecord(
            id=str(uuid4()),
            user_id=user.id,
            token_hash=token_hasher.hash(refresh_token),
            expires_at=refresh_expires_at,
            created_at=now,
        )
    )
    return AuthTokensOutput(
        user=build_auth_user_output(user),
        access_token=access_token,
        refresh_token=refresh_token,
        access_expires_at=access_expires_at,
        refresh_expires_at=refresh_expires_at,
    )

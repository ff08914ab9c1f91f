from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt

from anchor_blog.application.dto.auth import TokenClaims
from anchor_blog.application.ports.token_port import TokenPort
from anchor_blog.domain.entities.user import Role, User
from anchor_blog.domain.exceptions import InvalidTokenError, TokenSigningError


ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

ACCESS_TOKEN_TTL = timedelta(hours=1)
REFRESH_TOKEN_TTL = timedelta(days=7)

_REQUIRED_CLAIMS = ["exp", "iat", "nbf", "sub"]


def _build_token(
    *,
    user: User,
    secret: str,
    token_type: str,
    now: datetime,
    ttl: timedelta,
) -> tuple[str, datetime]:
    if user is None:
        raise TypeError("A user is required to mint a token.")
    if not secret:
        raise TokenSigningError(f"Cannot sign {token_type} token with an empty secret.")

    exp = now + ttl
    payload = {
        "sub": user.id,
        "username": user.username,
        "role": user.role.value,
        "type": token_type,
        "jti": str(uuid4()),
        "iat": int(now.timestamp()),
        "nbf": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    try:
        token = jwt.encode(payload, secret, algorithm=ALGORITHM)
    except jwt.PyJWTError as exc:
        raise TokenSigningError(f"Failed to sign {token_type} token.") from exc
    return token, exp


def generate_access_token(
    user: User,
    secret: str,
    *,
    now: datetime,
    ttl: timedelta = ACCESS_TOKEN_TTL,
) -> tuple[str, datetime]:
    return _build_token(user=user, secret=secret, token_type=ACCESS_TOKEN_TYPE, now=now, ttl=ttl)


def generate_refresh_token(
    user: User,
    secret: str,
    *,
    now: datetime,
    ttl: timedelta = REFRESH_TOKEN_TTL,
) -> tuple[str, datetime]:
    return _build_token(user=user, secret=secret, token_type=REFRESH_TOKEN_TYPE, now=now, ttl=ttl)


def _from_timestamp(value) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def validate_token(token: str, secret: str, *, expected_type: str) -> TokenClaims:
    if not secret:
        raise TokenSigningError("Cannot verify tokens with an empty secret.")
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.PyJWTError as exc:
        raise InvalidTokenError("Invalid token.") from exc

    if payload.get("type") != expected_type:
        raise InvalidTokenError("Invalid token type.")

    user_id = payload.get("sub")
    username = payload.get("username")
    if not user_id or not isinstance(user_id, str) or not isinstance(username, str):
        raise InvalidTokenError("Invalid token subject.")

    try:
        role = Role(payload.get("role"))
    except ValueError as exc:
        raise InvalidTokenError("Invalid token role.") from exc

    return TokenClaims(
        user_id=user_id,
        username=username,
        role=role,
        token_type=expected_type,
        token_id=str(payload.get("jti") or ""),
        issued_at=_from_timestamp(payload["iat"]),
        not_before=_from_timestamp(payload["nbf"]),
        expires_at=_from_timestamp(payload["exp"]),
    )


class JwtTokenService(TokenPort):
    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str,
        access_ttl_minutes: int = 60,
        refresh_ttl_days: int = 7,
    ):
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_ttl = timedelta(minutes=access_ttl_minutes)
        self._refresh_ttl = timedelta(days=refresh_ttl_days)

    def create_access_token(self, *, user: User, now: datetime) -> tuple[str, datetime]:
        return generate_access_token(user, self._access_secret, now=now, ttl=self._access_ttl)

    def create_refresh_token(self, *, user: User, now: datetime) -> tuple[str, datetime]:
        return generate_refresh_token(user, self._refresh_secret, now=now, ttl=self._refresh_ttl)

    def decode_access_token(self, *, token: str) -> TokenClaims:
        return validate_token(token, self._access_secret, expected_type=ACCESS_TOKEN_TYPE)

    def decode_refresh_token(self, *, token: str) -> TokenClaims:
        return validate_token(token, self._refresh_secret, expected_type=REFRESH_TOKEN_TYPE)

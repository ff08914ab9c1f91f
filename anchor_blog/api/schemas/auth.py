from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from anchor_blog.application.dto.auth import AuthUserOutput


class RegisterRequest(BaseModel):
    username: str = Field(..., max_length=64)
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=256)
    first_name: str = Field(..., max_length=120)
    last_name: str = Field(..., max_length=120)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=256)


class RefreshRequest(BaseModel):
    refresh_token: str | None = None


class AuthUserResponse(BaseModel):
    id: str
    username: str
    email: str
    role: str
    activated: bool


class RegisterResponse(BaseModel):
    user: AuthUserResponse
    activation_sent: bool


class AuthTokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    access_expires_at: datetime
    refresh_expires_at: datetime
    user: AuthUserResponse


class LogoutResponse(BaseModel):
    ok: bool


def to_auth_user_response(user: AuthUserOutput) -> AuthUserResponse:
    return AuthUserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role.value,
        activated=user.activated,
    )

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from anchor_blog.domain.entities.user import Role


@dataclass(frozen=True)
class AuthUserOutput:
    id: str
    username: str
    email: str
    role: Role
    activated: bool


@dataclass(frozen=True)
class RegisterUserInput:
    username: str
    email: str
    password: str
    first_name: str
    last_name: str


@dataclass(frozen=True)
class RegisterUserOutput:
    user: AuthUserOutput


@dataclass(frozen=True)
class LoginLocalInput:
    username: str
    password: str


@dataclass(frozen=True)
class LoginGoogleInput:
    code: str


@dataclass(frozen=True)
class RefreshSessionInput:
    refresh_token: str


@dataclass(frozen=True)
class LogoutInput:
    user_id: str


@dataclass(frozen=True)
class AuthTokensOutput:
    user: AuthUserOutput
    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    username: str
    role: Role
    token_type: str
    token_id: str
    issued_at: datetime
    not_before: datetime
    expires_at: datetime


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    username: str
    role: Role


@dataclass(frozen=True)
class GoogleIdentityInfo:
    subject: str
    email: str
    email_verified: bool
    first_name: str
    last_name: str
    picture_url: str | None


@dataclass(frozen=True)
class IssuedOneTimeToken:
    token: str
    user_id: str
    expires_at: datetime


@dataclass(frozen=True)
class RequestActivationOutput:
    user_id: str
    expires_at: datetime
    delivered: bool


@dataclass(frozen=True)
class ActivateAccountOutput:
    user: AuthUserOutput


@dataclass(frozen=True)
class ConfirmPasswordResetInput:
    token: str
    new_password: str


@dataclass(frozen=True)
class ChangeRoleInput:
    actor_id: str
    target_id: str

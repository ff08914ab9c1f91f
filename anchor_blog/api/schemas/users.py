from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from anchor_blog.api.schemas.auth import AuthUserResponse


class EmailRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., max_length=256)


class OkResponse(BaseModel):
    ok: bool


class ActivateResponse(BaseModel):
    user: AuthUserResponse


class TokenValidityResponse(BaseModel):
    valid: bool


class MeResponse(BaseModel):
    id: str
    username: str
    first_name: str
    last_name: str
    email: str
    role: str
    activated: bool
    last_seen: datetime | None
    created_at: datetime


class SocialLinkSchema(BaseModel):
    platform: str = Field(..., min_length=1, max_length=64)
    url: str = Field(..., min_length=1, max_length=2048)


class ProfileResponse(BaseModel):
    bio: str
    picture_url: str
    social_links: list[SocialLinkSchema]


class UpdateProfileRequest(BaseModel):
    bio: str | None = Field(default=None, max_length=2000)
    picture_url: str | None = Field(default=None, max_length=2048)
    social_links: list[SocialLinkSchema] | None = None

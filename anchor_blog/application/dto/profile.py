from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from anchor_blog.domain.entities.user import Role, SocialLink


@dataclass(frozen=True)
class ProfileOutput:
    bio: str
    picture_url: str
    social_links: tuple[SocialLink, ...]


@dataclass(frozen=True)
class UpdateProfileInput:
    user_id: str
    bio: str | None = None
    picture_url: str | None = None
    social_links: tuple[SocialLink, ...] | None = None


@dataclass(frozen=True)
class MeOutput:
    id: str
    username: str
    first_name: str
    last_name: str
    email: str
    role: Role
    activated: bool
    last_seen: datetime | None
    created_at: datetime

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    UNVERIFIED = "unverified"
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class FirstUserPolicy(str, Enum):
    """How the very first registered identity is created.

    ``UNVERIFIED`` treats it like any other registration. ``SUPERADMIN_BYPASS``
    creates it as an activated superadmin so an empty system can be bootstrapped.
    """

    UNVERIFIED = "unverified"
    SUPERADMIN_BYPASS = "superadmin_bypass"


@dataclass(frozen=True)
class SocialLink:
    platform: str
    url: str


@dataclass(frozen=True)
class UserProfile:
    bio: str = ""
    picture_url: str = ""
    social_links: tuple[SocialLink, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class User:
    id: str
    username: str
    first_name: str
    last_name: str
    email: str
    password_hash: str | None
    role: Role
    activated: bool
    last_seen: datetime | None
    profile: UserProfile
    updated_by: str | None
    created_at: datetime
    updated_at: datetime

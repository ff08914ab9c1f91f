from __future__ import annotations

import json
from typing import Any, Mapping

from anchor_blog.domain.entities.token import OneTimeToken, RefreshTokenRecord, TokenPurpose
from anchor_blog.domain.entities.user import Role, SocialLink, User, UserProfile


def _as_str(value: Any) -> str:
    return str(value)


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def map_profile(raw: Any) -> UserProfile:
    if raw is None:
        return UserProfile()
    if isinstance(raw, str):
        raw = json.loads(raw) if raw else {}
    links = tuple(
        SocialLink(platform=str(link.get("platform", "")), url=str(link.get("url", "")))
        for link in raw.get("social_links") or []
    )
    return UserProfile(
        bio=raw.get("bio") or "",
        picture_url=raw.get("picture_url") or "",
        social_links=links,
    )


def profile_to_json(profile: UserProfile) -> str:
    return json.dumps(
        {
            "bio": profile.bio,
            "picture_url": profile.picture_url,
            "social_links": [
                {"platform": link.platform, "url": link.url} for link in profile.social_links
            ],
        }
    )


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        username=row["username"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        password_hash=row.get("password_hash"),
        role=Role(row["role"]),
        activated=bool(row["activated"]),
        last_seen=row.get("last_seen"),
        profile=map_profile(row.get("profile")),
        updated_by=_as_optional_str(row.get("updated_by")),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def map_row_to_refresh_token(row: Mapping[str, Any]) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        token_hash=row["token_hash"],
        expires_at=row["expires_at"],
        created_at=row["created_at"],
    )


def map_row_to_one_time_token(row: Mapping[str, Any], *, purpose: TokenPurpose) -> OneTimeToken:
    return OneTimeToken(
        id=_as_str(row["id"]),
        purpose=purpose,
        user_id=_as_str(row["user_id"]),
        token=row["token"],
        expires_at=row["expires_at"],
        used=bool(row["used"]),
        created_at=row["created_at"],
    )

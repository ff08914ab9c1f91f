from __future__ import annotations

from datetime import date
from typing import Iterable
from uuid import UUID

from anchor_blog.domain.entities.post import Post
from anchor_blog.domain.entities.user import Role
from anchor_blog.domain.exceptions import InvalidPostError, PostNotFoundError


MAX_TITLE_LENGTH = 200
MAX_TAGS = 20
MAX_TAG_LENGTH = 40

MODERATOR_ROLES = frozenset({Role.ADMIN, Role.SUPERADMIN})


def parse_post_id(post_id: str) -> str:
    # Ids are UUIDs; anything else cannot name a post.
    try:
        return str(UUID(str(post_id).strip()))
    except ValueError as exc:
        raise PostNotFoundError("Post not found.") from exc


def validate_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise InvalidPostError("title cannot be empty.")
    if len(title) > MAX_TITLE_LENGTH:
        raise InvalidPostError(f"title must have at most {MAX_TITLE_LENGTH} characters.")
    return title


def validate_content(content: str) -> str:
    if not content.strip():
        raise InvalidPostError("content cannot be empty.")
    return content


def normalize_tags(tags: Iterable[str] | None) -> tuple[str, ...]:
    """Trimmed, lower-cased and de-duplicated, first occurrence wins."""
    seen: list[str] = []
    for tag in tags or ():
        tag = tag.strip().lower()
        if not tag or tag in seen:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise InvalidPostError(f"tags must have at most {MAX_TAG_LENGTH} characters.")
        seen.append(tag)
    if len(seen) > MAX_TAGS:
        raise InvalidPostError(f"a post can have at most {MAX_TAGS} tags.")
    return tuple(seen)


def parse_date(value: str, *, field_name: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise InvalidPostError(f"{field_name} must be a YYYY-MM-DD date.") from exc


def can_modify(post: Post, *, user_id: str, role: Role) -> bool:
    return post.author_id == user_id or role in MODERATOR_ROLES

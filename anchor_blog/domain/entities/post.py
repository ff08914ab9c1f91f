from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class Reaction(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


@dataclass(frozen=True)
class PageRequest:
    """1-based page; out-of-range values fall back to the defaults."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def of(cls, page: int | None, limit: int | None) -> "PageRequest":
        page = page if page and page > 0 else 1
        limit = limit if limit and 0 < limit <= MAX_PAGE_SIZE else DEFAULT_PAGE_SIZE
        return cls(page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Post:
    id: str
    title: str
    content: str
    author_id: str
    tags: tuple[str, ...]
    view_count: int
    created_at: datetime
    updated_at: datetime
    likes: tuple[str, ...] = field(default_factory=tuple)
    dislikes: tuple[str, ...] = field(default_factory=tuple)

    def reaction_of(self, user_id: str) -> Reaction | None:
        if user_id in self.likes:
            return Reaction.LIKE
        if user_id in self.dislikes:
            return Reaction.DISLIKE
        return None

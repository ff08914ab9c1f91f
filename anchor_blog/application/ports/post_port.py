from __future__ import annotations

from datetime import datetime
from typing import Protocol

from anchor_blog.domain.entities.post import PageRequest, Post, Reaction


class PostPort(Protocol):
    def create_post(self, post: Post) -> Post:
        ...

    def get_post(self, *, post_id: str) -> Post | None:
        ...

    def list_posts(self, *, page: PageRequest) -> list[Post]:
        """Newest first."""
        ...

    def search_by_title(self, *, query: str, page: PageRequest) -> list[Post]:
        ...

    def list_by_author(self, *, author_id: str, page: PageRequest) -> list[Post]:
        ...

    def filter_by_tags(self, *, tags: tuple[str, ...], page: PageRequest) -> list[Post]:
        """Posts carrying at least one of ``tags``."""
        ...

    def filter_by_created_range(self, *, start: datetime, end: datetime, page: PageRequest) -> list[Post]:
        """``start <= created_at < end``."""
        ...

    def update_post(
        self,
        *,
        post_id: str,
        title: str,
        content: str,
        tags: tuple[str, ...],
        updated_at: datetime,
    ) -> Post | None:
        ...

    def delete_post(self, *, post_id: str) -> bool:
        ...

    def set_reaction(self, *, post_id: str, user_id: str, reaction: Reaction, reacted_at: datetime) -> bool:
        """Stores the reaction, replacing the opposite one. False when it was already set."""
        ...

    def remove_reaction(self, *, post_id: str, user_id: str, reaction: Reaction) -> bool:
        ...

    def increment_view_count(self, *, post_id: str) -> int | None:
        """New count, or None when the post does not exist."""
        ...

    def most_viewed(self, *, limit: int) -> list[Post]:
        ...

    def total_views(self) -> int:
        ...

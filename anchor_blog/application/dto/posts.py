from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from anchor_blog.domain.entities.post import Post, Reaction
from anchor_blog.domain.entities.user import Role


@dataclass(frozen=True)
class CreatePostInput:
    author_id: str
    title: str
    content: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class UpdatePostInput:
    post_id: str
    actor_id: str
    actor_role: Role
    title: str | None = None
    content: str | None = None
    tags: tuple[str, ...] | None = None


@dataclass(frozen=True)
class DeletePostInput:
    post_id: str
    actor_id: str
    actor_role: Role


@dataclass(frozen=True)
class ReactionInput:
    post_id: str
    user_id: str
    reaction: Reaction


@dataclass(frozen=True)
class ReactionStatusOutput:
    post_id: str
    liked: bool
    disliked: bool


@dataclass(frozen=True)
class SearchPostsInput:
    query: str
    search_type: str = "title"
    page: int | None = None
    limit: int | None = None


@dataclass(frozen=True)
class FilterPostsInput:
    tags: tuple[str, ...] = ()
    start_date: str | None = None
    end_date: str | None = None
    page: int | None = None
    limit: int | None = None


@dataclass(frozen=True)
class PostOutput:
    id: str
    title: str
    content: str
    author_id: str
    tags: tuple[str, ...]
    view_count: int
    likes: tuple[str, ...]
    dislikes: tuple[str, ...]
    created_at: datetime
    updated_at: datetime


def build_post_output(post: Post) -> PostOutput:
    return PostOutput(
        id=post.id,
        title=post.title,
        content=post.content,
        author_id=post.author_id,
        tags=post.tags,
        view_count=post.view_count,
        likes=post.likes,
        dislikes=post.dislikes,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from anchor_blog.application.dto.posts import PostOutput, ReactionStatusOutput


class CreatePostRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list)


class UpdatePostRequest(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    content: str | None = None
    tags: list[str] | None = None


class PostResponse(BaseModel):
    id: str
    title: str
    content: str
    author_id: str
    tags: list[str]
    view_count: int
    likes: int
    dislikes: int
    created_at: datetime
    updated_at: datetime


class PostListResponse(BaseModel):
    posts: list[PostResponse]
    count: int


class ReactionStatusResponse(BaseModel):
    post_id: str
    liked: bool
    disliked: bool


class ViewCountResponse(BaseModel):
    post_id: str
    view_count: int


class ViewStatsResponse(BaseModel):
    total_views: int


def to_post_response(output: PostOutput) -> PostResponse:
    return PostResponse(
        id=output.id,
        title=output.title,
        content=output.content,
        author_id=output.author_id,
        tags=list(output.tags),
        view_count=output.view_count,
        likes=len(output.likes),
        dislikes=len(output.dislikes),
        created_at=output.created_at,
        updated_at=output.updated_at,
    )


def to_post_list_response(outputs: list[PostOutput]) -> PostListResponse:
    posts = [to_post_response(output) for output in outputs]
    return PostListResponse(posts=posts, count=len(posts))


def to_reaction_status_response(output: ReactionStatusOutput) -> ReactionStatusResponse:
    return ReactionStatusResponse(post_id=output.post_id, liked=output.liked, disliked=output.disliked)

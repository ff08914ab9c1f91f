from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone
from uuid import uuid4

from anchor_blog.application.dto.posts import (
    CreatePostInput,
    DeletePostInput,
    FilterPostsInput,
    PostOutput,
    SearchPostsInput,
    UpdatePostInput,
    build_post_output,
)
from anchor_blog.application.ports.post_port import PostPort
from anchor_blog.domain.entities.post import PageRequest, Post
from anchor_blog.domain.exceptions import InvalidPostError, PostAccessDeniedError, PostNotFoundError
from anchor_blog.domain.services.post_rules import (
    can_modify,
    normalize_tags,
    parse_date,
    parse_post_id,
    validate_content,
    validate_title,
)

from .auth_common import Clock, utcnow


logger = logging.getLogger(__name__)

SEARCH_TYPES = ("title", "author")


def load_post(post_port: PostPort, post_id: str) -> Post:
    post = post_port.get_post(post_id=parse_post_id(post_id))
    if post is None:
        raise PostNotFoundError("Post not found.")
    return post


class CreatePostUseCase:
    def __init__(self, *, post_port: PostPort, clock: Clock = utcnow):
        self._post_port = post_port
        self._clock = clock

    def execute(self, command: CreatePostInput) -> PostOutput:
        now = self._clock()
        post = self._post_port.create_post(
            Post(
                id=str(uuid4()),
                title=validate_title(command.title),
                content=validate_content(command.content),
                author_id=command.author_id,
                tags=normalize_tags(command.tags),
                view_count=0,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("posts: created post_id=%s author_id=%s", post.id, post.author_id)
        return build_post_output(post)


class GetPostUseCase:
    """Reads one post; each read counts as a view unless ``count_view`` is off."""

    def __init__(self, *, post_port: PostPort):
        self._post_port = post_port

    def execute(self, *, post_id: str, count_view: bool = True) -> PostOutput:
        post_id = parse_post_id(post_id)
        if count_view and self._post_port.increment_view_count(post_id=post_id) is None:
            raise PostNotFoundError("Post not found.")
        return build_post_output(load_post(self._post_port, post_id))


class ListPostsUseCase:
    def __init__(self, *, post_port: PostPort):
        self._post_port = post_port

    def execute(self, *, page: int | None = None, limit: int | None = None) -> list[PostOutput]:
        posts = self._post_port.list_posts(page=PageRequest.of(page, limit))
        return [build_post_output(post) for post in posts]


class SearchPostsUseCase:
    def __init__(self, *, post_port: PostPort):
        self._post_port = post_port

    def execute(self, command: SearchPostsInput) -> list[PostOutput]:
        query = command.query.strip()
        if not query:
            raise InvalidPostError("Search query is required.")
        if command.search_type not in SEARCH_TYPES:
            raise InvalidPostError("Search type must be 'title' or 'author'.")

        page = PageRequest.of(command.page, command.limit)
        if command.search_type == "author":
            posts = self._post_port.list_by_author(author_id=query, page=page)
        else:
            posts = self._post_port.search_by_title(query=query, page=page)
        return [build_post_output(post) for post in posts]


class FilterPostsUseCase:
    """Filters by tags when any are given, otherwise by an inclusive creation-date range."""

    def __init__(self, *, post_port: PostPort):
        self._post_port = post_port

    def execute(self, command: FilterPostsInput) -> list[PostOutput]:
        page = PageRequest.of(command.page, command.limit)
        tags = normalize_tags(command.tags)
        if tags:
            posts = self._post_port.filter_by_tags(tags=tags, page=page)
        elif command.start_date and command.end_date:
            start_day = parse_date(command.start_date, field_name="start_date")
            end_day = parse_date(command.end_date, field_name="end_date")
            if start_day > end_day:
                raise InvalidPostError("start_date must not be after end_date.")
            posts = self._post_port.filter_by_created_range(
                start=datetime.combine(start_day, time.min, tzinfo=timezone.utc),
                end=datetime.combine(end_day + timedelta(days=1), time.min, tzinfo=timezone.utc),
                page=page,
            )
        else:
            raise InvalidPostError("Either tags or start_date and end_date must be provided.")
        return [build_post_output(post) for post in posts]


class UpdatePostUseCase:
    def __init__(self, *, post_port: PostPort, clock: Clock = utcnow):
        self._post_port = post_port
        self._clock = clock

    def execute(self, command: UpdatePostInput) -> PostOutput:
        if command.title is None and command.content is None and command.tags is None:
            raise InvalidPostError("No fields to update.")

        post = load_post(self._post_port, command.post_id)
        if not can_modify(post, user_id=command.actor_id, role=command.actor_role):
            logger.info("posts: update denied post_id=%s actor_id=%s", post.id, command.actor_id)
            raise PostAccessDeniedError("You can only update your own posts.")

        updated = self._post_port.update_post(
            post_id=post.id,
            title=validate_title(command.title) if command.title is not None else post.title,
            content=validate_content(command.content) if command.content is not None else post.content,
            tags=normalize_tags(command.tags) if command.tags is not None else post.tags,
            updated_at=self._clock(),
        )
        if updated is None:
            raise PostNotFoundError("Post not found.")
        logger.info("posts: updated post_id=%s actor_id=%s", post.id, command.actor_id)
        return build_post_output(updated)


class DeletePostUseCase:
    def __init__(self, *, post_port: PostPort):
        self._post_port = post_port

    def execute(self, command: DeletePostInput) -> None:
        post = load_post(self._post_port, command.post_id)
        if not can_modify(post, user_id=command.actor_id, role=command.actor_role):
            logger.info("posts: delete denied post_id=%s actor_id=%s", post.id, command.actor_id)
            raise PostAccessDeniedError("You can only delete your own posts.")
        if not self._post_port.delete_post(post_id=post.id):
            raise PostNotFoundError("Post not found.")
        logger.info("posts: deleted post_id=%s actor_id=%s", post.id, command.actor_id)


class GetPostViewCountUseCase:
    def __init__(self, *, post_port: PostPort):
        self._post_port = post_port

    def execute(self, *, post_id: str) -> int:
        return load_post(self._post_port, post_id).view_count


class GetPopularPostsUseCase:
    def __init__(self, *, post_port: PostPort):
        self._post_port = post_port

    def execute(self, *, limit: int | None = None) -> list[PostOutput]:
        posts = self._post_port.most_viewed(limit=PageRequest.of(1, limit).limit)
        return [build_post_output(post) for post in posts]


class GetViewStatsUseCase:
    def __init__(self, *, post_port: PostPort):
        self._post_port = post_port

    def execute(self) -> int:
        return self._post_port.total_views()

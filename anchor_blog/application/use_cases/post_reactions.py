from __future__ import annotations

import logging

from anchor_blog.application.dto.posts import ReactionInput, ReactionStatusOutput
from anchor_blog.application.ports.post_port import PostPort
from anchor_blog.domain.entities.post import Reaction
from anchor_blog.domain.exceptions import AlreadyReactedError

from .auth_common import Clock, utcnow
from .posts import load_post


logger = logging.getLogger(__name__)


def _status(post_id: str, current: Reaction | None) -> ReactionStatusOutput:
    return ReactionStatusOutput(
        post_id=post_id,
        liked=current is Reaction.LIKE,
        disliked=current is Reaction.DISLIKE,
    )


class ReactToPostUseCase:
    """Likes or dislikes a post. A like replaces a dislike and vice versa."""

    def __init__(self, *, post_port: PostPort, clock: Clock = utcnow):
        self._post_port = post_port
        self._clock = clock

    def execute(self, command: ReactionInput) -> ReactionStatusOutput:
        post = load_post(self._post_port, command.post_id)
        stored = self._post_port.set_reaction(
            post_id=post.id,
            user_id=command.user_id,
            reaction=command.reaction,
            reacted_at=self._clock(),
        )
        if not stored:
            raise AlreadyReactedError(f"Post already {command.reaction.value}d.")
        logger.info(
            "post_reactions: %s post_id=%s user_id=%s",
            command.reaction.value,
            post.id,
            command.user_id,
        )
        return _status(post.id, command.reaction)


class RemoveReactionUseCase:
    def __init__(self, *, post_port: PostPort):
        self._post_port = post_port

    def execute(self, command: ReactionInput) -> ReactionStatusOutput:
        post = load_post(self._post_port, command.post_id)
        current = post.reaction_of(command.user_id)
        removed = self._post_port.remove_reaction(
            post_id=post.id,
            user_id=command.user_id,
            reaction=command.reaction,
        )
        if removed or current is command.reaction:
            current = None
        return _status(post.id, current)


class GetReactionStatusUseCase:
    def __init__(self, *, post_port: PostPort):
        self._post_port = post_port

    def execute(self, *, post_id: str, user_id: str) -> ReactionStatusOutput:
        post = load_post(self._post_port, post_id)
        return _status(post.id, post.reaction_of(user_id))


from __future__ import annotations

from dataclasses import replace

from anchor_blog.application.dto.profile import MeOutput, ProfileOutput, UpdateProfileInput
from anchor_blog.application.ports.user_port import UserPort
from anchor_blog.domain.entities.user import User
from anchor_blog.domain.exceptions import UserNotFoundError

from .auth_common import Clock, utcnow


def _load_user(user_port: UserPort, user_id: str) -> User:
    user = user_port.get_user_by_id(user_id=user_id)
    if user is None:
        raise UserNotFoundError("User not found.")
    return user


class GetMeUseCase:
    def __init__(self, *, user_port: UserPort):
        self._user_port = user_port

    def execute(self, *, user_id: str) -> MeOutput:
        user = _load_user(self._user_port, user_id)
        return MeOutput(
            id=user.id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            role=user.role,
            activated=user.activated,
            last_seen=user.last_seen,
            created_at=user.created_at,
        )


class GetProfileUseCase:
    def __init__(self, *, user_port: UserPort):
        self._user_port = user_port

    def execute(self, *, user_id: str) -> ProfileOutput:
        profile = _load_user(self._user_port, user_id).profile
        return ProfileOutput(
            bio=profile.bio,
            picture_url=profile.picture_url,
            social_links=profile.social_links,
        )


class UpdateProfileUseCase:
    def __init__(self, *, user_port: UserPort, clock: Clock = utcnow):
        self._user_port = user_port
        self._clock = clock

    def execute(self, command: UpdateProfileInput) -> ProfileOutput:
        profile = _load_user(self._user_port, command.user_id).profile
        if command.bio is not None:
            profile = replace(profile, bio=command.bio)
        if command.picture_url is not None:
            profile = replace(profile, picture_url=command.picture_url)
        if command.social_links is not None:
            profile = replace(profile, social_links=tuple(command.social_links))

        self._user_port.update_profile(
            user_id=command.user_id,
            profile=profile,
            updated_at=self._clock(),
        )
        return ProfileOutput(
            bio=profile.bio,
            picture_url=profile.picture_url,
            social_links=profile.social_links,
        )

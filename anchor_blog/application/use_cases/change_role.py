from __future__ import annotations

import logging

from anchor_blog.application.dto.auth import ChangeRoleInput
from anchor_blog.application.ports.user_port import UserPort
from anchor_blog.domain.entities.user import Role
from anchor_blog.domain.exceptions import CannotDemoteSelfError, UserNotFoundError
from anchor_blog.domain.services.role_transitions import role_after_demotion, role_after_promotion

from .auth_common import Clock, utcnow


logger = logging.getLogger(__name__)


class PromoteToAdminUseCase:
    def __init__(self, *, user_port: UserPort, clock: Clock = utcnow):
        self._user_port = user_port
        self._clock = clock

    def execute(self, command: ChangeRoleInput) -> Role:
        target = self._user_port.get_user_by_id(user_id=command.target_id)
        if target is None:
            raise UserNotFoundError("User not found.")

        new_role = role_after_promotion(target.role)
        self._user_port.update_user_role(
            user_id=target.id,
            role=new_role,
            updated_by=command.actor_id,
            updated_at=self._clock(),
        )
        logger.info(
            "change_role: promoted target_id=%s actor_id=%s",
            target.id,
            command.actor_id,
        )
        return new_role


class DemoteToUserUseCase:
    def __init__(self, *, user_port: UserPort, clock: Clock = utcnow):
        self._user_port = user_port
        self._clock = clock

    def execute(self, command: ChangeRoleInput) -> Role:
        if command.actor_id == command.target_id:
            raise CannotDemoteSelfError("An admin cannot demote themselves.")

        target = self._user_port.get_user_by_id(user_id=command.target_id)
        if target is None:
            raise UserNotFoundError("User not found.")

        new_role = role_after_demotion(
            actor_id=command.actor_id,
            target_id=target.id,
            current=target.role,
        )
        self._user_port.update_user_role(
            user_id=target.id,
            role=new_role,
            updated_by=command.actor_id,
            updated_at=self._clock(),
        )
        logger.info(
            "change_role: demoted target_id=%s actor_id=%s",
            target.id,
            command.actor_id,
        )
        return new_role

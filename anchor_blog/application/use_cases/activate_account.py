from __future__ import annotations

import logging
from dataclasses import replace

from anchor_blog.application.dto.auth import ActivateAccountOutput
from anchor_blog.application.ports.user_port import UserPort
from anchor_blog.domain.entities.token import TokenPurpose
from anchor_blog.domain.exceptions import UserNotFoundError
from anchor_blog.domain.services.role_transitions import role_after_activation

from .auth_common import Clock, build_auth_user_output, utcnow
from .one_time_token import OneTimeTokenService


logger = logging.getLogger(__name__)


class ActivateAccountUseCase:
    def __init__(
        self,
        *,
        user_port: UserPort,
        activation_tokens: OneTimeTokenService,
        clock: Clock = utcnow,
    ):
        if activation_tokens.purpose is not TokenPurpose.ACTIVATION:
            raise ValueError("ActivateAccountUseCase requires an activation token service.")
        self._user_port = user_port
        self._activation_tokens = activation_tokens
        self._clock = clock

    def execute(self, *, token: str) -> ActivateAccountOutput:
        user_id = self._activation_tokens.consume(token=token.strip())
        user = self._user_port.get_user_by_id(user_id=user_id)
        if user is None:
            raise UserNotFoundError("User not found.")

        role = role_after_activation(user.role)
        self._user_port.activate_user(user_id=user.id, role=role, updated_at=self._clock())
        logger.info(
            "activate_account: activated user_id=%s role=%s",
            user.id,
            role.value,
        )
        return ActivateAccountOutput(user=build_auth_user_output(replace(user, role=role, activated=True)))

from __future__ import annotations

import logging

from anchor_blog.application.dto.auth import LogoutInput
from anchor_blog.application.ports.refresh_token_port import RefreshTokenPort


logger = logging.getLogger(__name__)


class LogoutSessionUseCase:
    """Revokes every refresh token of the identity (all devices)."""

    def __init__(self, *, refresh_token_port: RefreshTokenPort):
        self._refresh_token_port = refresh_token_port

    def execute(self, command: LogoutInput) -> None:
        self._refresh_token_port.delete_all_by_user(user_id=command.user_id)
        logger.info("logout_session: revoked all refresh tokens user_id=%s", command.user_id)

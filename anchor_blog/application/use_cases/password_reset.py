from __future__ import annotations

import logging
from urllib.parse import urlencode

from anchor_blog.application.dto.auth import ConfirmPasswordResetInput
from anchor_blog.application.ports.notification_port import NotificationPort
from anchor_blog.application.ports.password_hasher_port import PasswordHasherPort
from anchor_blog.application.ports.refresh_token_port import RefreshTokenPort
from anchor_blog.application.ports.user_port import UserPort
from anchor_blog.domain.entities.token import TokenPurpose
from anchor_blog.domain.exceptions import NotificationDeliveryError, UserNotFoundError
from anchor_blog.domain.services.registration_rules import normalize_email, validate_password

from .auth_common import Clock, utcnow
from .one_time_token import OneTimeTokenService


logger = logging.getLogger(__name__)

RESET_PATH = "/v1/users/reset-password"


class RequestPasswordResetUseCase:
    """Issues a reset link. Unknown emails are a silent no-op."""

    def __init__(
        self,
        *,
        user_port: UserPort,
        reset_tokens: OneTimeTokenService,
        notifier: NotificationPort,
        public_base_url: str,
    ):
        if reset_tokens.purpose is not TokenPurpose.PASSWORD_RESET:
            raise ValueError("RequestPasswordResetUseCase requires a password reset token service.")
        self._user_port = user_port
        self._reset_tokens = reset_tokens
        self._notifier = notifier
        self._public_base_url = public_base_url.rstrip("/")

    def execute(self, *, email: str) -> bool:
        user = self._user_port.get_user_by_email(email=normalize_email(email))
        if user is None:
            logger.info("password_reset: request for unknown email ignored")
            return False

        issued = self._reset_tokens.issue(user_id=user.id)
        link = f"{self._public_base_url}{RESET_PATH}?{urlencode({'token': issued.token})}"
        try:
            self._notifier.send_link(
                recipient=user.email,
                subject="Reset your password",
                link=link,
                expires_at=issued.expires_at,
            )
        except NotificationDeliveryError as exc:
            logger.warning("password_reset: delivery failed user_id=%s error=%s", user.id, exc)
        return True


class ValidatePasswordResetTokenUseCase:
    def __init__(self, *, reset_tokens: OneTimeTokenService):
        self._reset_tokens = reset_tokens

    def execute(self, *, token: str) -> bool:
        return self._reset_tokens.is_valid(token=token.strip())


class ConfirmPasswordResetUseCase:
    def __init__(
        self,
        *,
        user_port: UserPort,
        reset_tokens: OneTimeTokenService,
        password_hasher: PasswordHasherPort,
        refresh_token_port: RefreshTokenPort,
        clock: Clock = utcnow,
    ):
        if reset_tokens.purpose is not TokenPurpose.PASSWORD_RESET:
            raise ValueError("ConfirmPasswordResetUseCase requires a password reset token service.")
        self._user_port = user_port
        self._reset_tokens = reset_tokens
        self._password_hasher = password_hasher
        self._refresh_token_port = refresh_token_port
        self._clock = clock

    def execute(self, command: ConfirmPasswordResetInput) -> str:
        new_password = validate_password(command.new_password)
        user_id = self._reset_tokens.consume(token=command.token.strip())
        user = self._user_port.get_user_by_id(user_id=user_id)
        if user is None:
            raise UserNotFoundError("User not found.")

        self._user_port.update_password_hash(
            user_id=user.id,
            password_hash=self._password_hasher.hash(new_password),
            updated_at=self._clock(),
        )
        self._refresh_token_port.delete_all_by_user(user_id=user.id)
        logger.info("password_reset: password updated and sessions revoked user_id=%s", user.id)
        return user.id

from __future__ import annotations

import logging
from urllib.parse import urlencode

from anchor_blog.application.dto.auth import RequestActivationOutput
from anchor_blog.application.ports.notification_port import NotificationPort
from anchor_blog.application.ports.user_port import UserPort
from anchor_blog.domain.entities.token import TokenPurpose
from anchor_blog.domain.entities.user import User
from anchor_blog.domain.exceptions import NotificationDeliveryError, UserNotFoundError
from anchor_blog.domain.services.registration_rules import normalize_email

from .one_time_token import OneTimeTokenService


logger = logging.getLogger(__name__)

ACTIVATION_PATH = "/v1/users/activate"


class RequestActivationUseCase:
    def __init__(
        self,
        *,
        user_port: UserPort,
        activation_tokens: OneTimeTokenService,
        notifier: NotificationPort,
        public_base_url: str,
    ):
        if activation_tokens.purpose is not TokenPurpose.ACTIVATION:
            raise ValueError("RequestActivationUseCase requires an activation token service.")
        self._user_port = user_port
        self._activation_tokens = activation_tokens
        self._notifier = notifier
        self._public_base_url = public_base_url.rstrip("/")

    def execute(self, *, user_id: str) -> RequestActivationOutput:
        user = self._user_port.get_user_by_id(user_id=user_id)
        if user is None:
            raise UserNotFoundError("User not found.")
        return self._issue_and_send(user)

    def resend_by_email(self, *, email: str) -> RequestActivationOutput | None:
        user = self._user_port.get_user_by_email(email=normalize_email(email))
        if user is None:
            logger.info("request_activation: resend skipped reason=unknown_email")
            return None
        if user.activated:
            logger.info("request_activation: resend skipped reason=already_activated user_id=%s", user.id)
            return None
        return self._issue_and_send(user)

    def _issue_and_send(self, user: User) -> RequestActivationOutput:
        issued = self._activation_tokens.issue(user_id=user.id)
        link = f"{self._public_base_url}{ACTIVATION_PATH}?{urlencode({'token': issued.token})}"
        delivered = True
        try:
            self._notifier.send_link(
                recipient=user.email,
                subject="Activate your account",
                link=link,
                expires_at=issued.expires_at,
            )
        except NotificationDeliveryError as exc:
            delivered = False
            logger.warning(
                "request_activation: delivery failed user_id=%s error=%s",
                user.id,
                exc,
            )
        return RequestActivationOutput(
            user_id=user.id,
            expires_at=issued.expires_at,
            delivered=delivered,
        )

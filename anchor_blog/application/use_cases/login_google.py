from __future__ import annotations

import logging
from uuid import uuid4

from anchor_blog.application.dto.auth import AuthTokensOutput, LoginGoogleInput
from anchor_blog.application.ports.google_oauth_port import GoogleOauthPort
from anchor_blog.application.ports.refresh_token_port import RefreshTokenPort
from anchor_blog.application.ports.token_hasher_port import TokenHasherPort
from anchor_blog.application.ports.token_port import TokenPort
from anchor_blog.application.ports.user_port import UserPort
from anchor_blog.domain.entities.user import Role, UserProfile
from anchor_blog.domain.exceptions import GoogleTokenValidationError
from anchor_blog.domain.services.registration_rules import normalize_email

from .auth_common import Clock, issue_tokens, utcnow


logger = logging.getLogger(__name__)


class LoginGoogleUseCase:
    def __init__(
        self,
        *,
        user_port: UserPort,
        google_oauth_port: GoogleOauthPort,
        token_port: TokenPort,
        token_hasher: TokenHasherPort,
        refresh_token_port: RefreshTokenPort,
        clock: Clock = utcnow,
    ):
        self._user_port = user_port
        self._google_oauth_port = google_oauth_port
        self._token_port = token_port
        self._token_hasher = token_hasher
        self._refresh_token_port = refresh_token_port
        self._clock = clock

    def execute(self, command: LoginGoogleInput) -> AuthTokensOutput:
        google_identity = self._google_oauth_port.fetch_identity(code=command.code)
        if not google_identity.email_verified:
            raise GoogleTokenValidationError("Google account email is not verified.")

        email = normalize_email(google_identity.email)
        now = self._clock()

        user = self._user_port.get_user_by_email(email=email)
        if user is None:
            # The provider vouches for the email, so the unverified gate is skipped.
            user = self._user_port.create_user(
                user_id=str(uuid4()),
                username=email,
                first_name=google_identity.first_name,
                last_name=google_identity.last_name,
                email=email,
                password_hash=None,
                role=Role.USER,
                activated=True,
                profile=UserProfile(picture_url=google_identity.picture_url or ""),
                created_at=now,
            )
            logger.info("login_google: provisioned user_id=%s", user.id)

        self._user_port.update_last_seen(user_id=user.id, last_seen=now)
        output = issue_tokens(
            user=user,
            token_port=self._token_port,
            token_hasher=self._token_hasher,
            refresh_token_port=self._refresh_token_port,
            now=now,
        )
        logger.info("login_google: issued tokens user_id=%s", user.id)
        return output

from __future__ import annotations

import logging

from anchor_blog.application.dto.auth import AuthTokensOutput, LoginLocalInput
from anchor_blog.application.ports.password_hasher_port import PasswordHasherPort
from anchor_blog.application.ports.refresh_token_port import RefreshTokenPort
from anchor_blog.application.ports.token_hasher_port import TokenHasherPort
from anchor_blog.application.ports.token_port import TokenPort
from anchor_blog.application.ports.user_port import UserPort
from anchor_blog.domain.exceptions import InvalidCredentialsError

from .auth_common import Clock, issue_tokens, utcnow


logger = logging.getLogger(__name__)


class LoginLocalUseCase:
    def __init__(
        self,
        *,
        user_port: UserPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        token_hasher: TokenHasherPort,
        refresh_token_port: RefreshTokenPort,
        clock: Clock = utcnow,
    ):
        self._user_port = user_port
        self._password_hasher = password_hasher
        self._token_port = token_port
        self._token_hasher = token_hasher
        self._refresh_token_port = refresh_token_port
        self._clock = clock
        self._dummy_hash: str | None = None

    def execute(self, command: LoginLocalInput) -> AuthTokensOutput:
        username = command.username.strip()
        user = self._user_port.get_user_by_username(username=username)
        if user is None:
            # Spend one verification so unknown usernames cost the same as bad passwords.
            self._password_hasher.verify(command.password, self._get_dummy_hash())
            logger.info("login_local: rejected reason=unknown_username username=%s", username)
            raise InvalidCredentialsError("Invalid credentials.")

        if not user.password_hash:
            logger.info("login_local: rejected reason=no_local_password user_id=%s", user.id)
            raise InvalidCredentialsError("Invalid credentials.")

        verified, replacement_hash = self._password_hasher.verify_and_update(
            command.password,
            user.password_hash,
        )
        if not verified:
            logger.info("login_local: rejected reason=bad_password user_id=%s", user.id)
            raise InvalidCredentialsError("Invalid credentials.")

        now = self._clock()
        if replacement_hash:
            self._user_port.update_password_hash(
                user_id=user.id,
                password_hash=replacement_hash,
                updated_at=now,
            )
        self._user_port.update_last_seen(user_id=user.id, last_seen=now)

        output = issue_tokens(
            user=user,
            token_port=self._token_port,
            token_hasher=self._token_hasher,
            refresh_token_port=self._refresh_token_port,
            now=now,
        )
        logger.info("login_local: issued tokens user_id=%s", user.id)
        return output

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self._password_hasher.hash("anchor-blog-dummy-password")
        return self._dummy_hash

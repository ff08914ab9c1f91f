from __future__ import annotations

import logging

from anchor_blog.application.dto.auth import AuthTokensOutput, RefreshSessionInput
from anchor_blog.application.ports.refresh_token_port import RefreshTokenPort
from anchor_blog.application.ports.token_hasher_port import TokenHasherPort
from anchor_blog.application.ports.token_port import TokenPort
from anchor_blog.application.ports.user_port import UserPort
from anchor_blog.domain.exceptions import InvalidTokenError, RefreshTokenNotFoundError

from .auth_common import Clock, issue_tokens, utcnow


logger = logging.getLogger(__name__)


class RefreshSessionUseCase:
    def __init__(
        self,
        *,
        user_port: UserPort,
        token_port: TokenPort,
        token_hasher: TokenHasherPort,
        refresh_token_port: RefreshTokenPort,
        clock: Clock = utcnow,
    ):
        self._user_port = user_port
        self._token_port = token_port
        self._token_hasher = token_hasher
        self._refresh_token_port = refresh_token_port
        self._clock = clock

    def execute(self, command: RefreshSessionInput) -> AuthTokensOutput:
        token = command.refresh_token.strip()
        if not token:
            raise InvalidTokenError("Missing refresh token.")

        claims = self._token_port.decode_refresh_token(token=token)

        token_hash = self._token_hasher.hash(token)
        try:
            record = self._refresh_token_port.find_by_hash(token_hash=token_hash)
        except RefreshTokenNotFoundError as exc:
            logger.info("refresh_session: rejected reason=unknown_hash user_id=%s", claims.user_id)
            raise InvalidTokenError("Invalid refresh token.") from exc

        now = self._clock()
        if not self._token_hasher.matches(record.token_hash, token):
            logger.warning("refresh_session: rejected reason=hash_mismatch user_id=%s", claims.user_id)
            raise InvalidTokenError("Invalid refresh token.")
        if record.is_expired(now) or record.user_id != claims.user_id:
            logger.info("refresh_session: rejected reason=stale_record user_id=%s", claims.user_id)
            self._refresh_token_port.delete_by_hash(token_hash=token_hash)
            raise InvalidTokenError("Invalid refresh token.")

        # Only the caller that removes the record may rotate it.
        if not self._refresh_token_port.delete_by_hash(token_hash=token_hash):
            logger.info("refresh_session: rejected reason=already_rotated user_id=%s", claims.user_id)
            raise InvalidTokenError("Invalid refresh token.")

        user = self._user_port.get_user_by_id(user_id=claims.user_id)
        if user is None:
            logger.info("refresh_session: rejected reason=user_gone user_id=%s", claims.user_id)
            raise InvalidTokenError("Invalid refresh token.")

        output = issue_tokens(
            user=user,
            token_port=self._token_port,
            token_hasher=self._token_hasher,
            refresh_token_port=self._refresh_token_port,
            now=now,
        )
        logger.info("refresh_session: rotated user_id=%s", user.id)
        return output

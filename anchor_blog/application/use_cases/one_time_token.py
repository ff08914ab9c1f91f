from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from uuid import uuid4

from anchor_blog.application.dto.auth import IssuedOneTimeToken
from anchor_blog.application.ports.one_time_token_port import OneTimeTokenPort
from anchor_blog.domain.entities.token import OneTimeToken, TokenPurpose
from anchor_blog.domain.exceptions import (
    ExpiredTokenError,
    OneTimeTokenNotFoundError,
    TokenAlreadyUsedError,
)

from .auth_common import Clock, utcnow


logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


class OneTimeTokenService:
    """Expiring, single-use tokens delivered out of band.

    One instance exists per purpose (activation, password reset), each backed by
    its own store. A token is valid iff it is unused and ``now < expires_at``;
    both conditions are re-checked at consumption time.
    """

    def __init__(
        self,
        *,
        purpose: TokenPurpose,
        token_port: OneTimeTokenPort,
        default_ttl: timedelta,
        clock: Clock = utcnow,
    ):
        if token_port.purpose is not purpose:
            raise ValueError(
                f"Token store for {token_port.purpose.value} cannot back {purpose.value} tokens."
            )
        self._purpose = purpose
        self._token_port = token_port
        self._default_ttl = default_ttl
        self._clock = clock

    @property
    def purpose(self) -> TokenPurpose:
        return self._purpose

    def issue(self, *, user_id: str, ttl: timedelta | None = None) -> IssuedOneTimeToken:
        now = self._clock()
        record = OneTimeToken(
            id=str(uuid4()),
            purpose=self._purpose,
            user_id=user_id,
            token=secrets.token_hex(TOKEN_BYTES),
            expires_at=now + (ttl if ttl is not None else self._default_ttl),
            used=False,
            created_at=now,
        )
        self._token_port.create_token(record)
        logger.info(
            "one_time_token: issued purpose=%s user_id=%s expires_at=%s",
            self._purpose.value,
            user_id,
            record.expires_at.isoformat(),
        )
        return IssuedOneTimeToken(token=record.token, user_id=user_id, expires_at=record.expires_at)

    def is_valid(self, *, token: str) -> bool:
        """False for unknown, expired or used tokens; storage faults propagate."""
        if not token:
            return False
        record = self._token_port.get_by_token(token=token)
        if record is None or record.purpose is not self._purpose:
            return False
        return record.is_valid(self._clock())

    def consume(self, *, token: str) -> str:
        """Marks the token used and returns the owning user id."""
        now = self._clock()
        if token:
            consumed = self._token_port.mark_used(token=token, now=now)
            if consumed is not None and consumed.purpose is self._purpose:
                logger.info(
                    "one_time_token: consumed purpose=%s user_id=%s",
                    self._purpose.value,
                    consumed.user_id,
                )
                return consumed.user_id

        record = self._token_port.get_by_token(token=token) if token else None
        if record is None or record.purpose is not self._purpose:
            raise OneTimeTokenNotFoundError("Token not found.")
        if record.used:
            raise TokenAlreadyUsedError("Token was already used.")
        if record.is_expired(now):
            raise ExpiredTokenError("Token has expired.")
        # Lost a race with a concurrent consumer between the update and the read.
        raise TokenAlreadyUsedError("Token was already used.")

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from anchor_blog.domain.entities.token import OneTimeToken, TokenPurpose


class OneTimeTokenPort(Protocol):
    purpose: TokenPurpose

    def create_token(self, token: OneTimeToken) -> None:
        ...

    def get_by_token(self, *, token: str) -> OneTimeToken | None:
        ...

    def mark_used(self, *, token: str, now: datetime) -> OneTimeToken | None:
        """Flip ``used`` to true only if the token is unused and unexpired at ``now``.

        Returns the updated record, or None when the condition did not hold.
        """
        ...

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from anchor_blog.application.dto.auth import TokenClaims
from anchor_blog.domain.entities.user import User


class TokenPort(Protocol):
    def create_access_token(self, *, user: User, now: datetime) -> tuple[str, datetime]:
        ...

    def create_refresh_token(self, *, user: User, now: datetime) -> tuple[str, datetime]:
        ...

    def decode_access_token(self, *, token: str) -> TokenClaims:
        ...

    def decode_refresh_token(self, *, token: str) -> TokenClaims:
        ...

from __future__ import annotations

from typing import Protocol

from anchor_blog.domain.entities.token import RefreshTokenRecord


class RefreshTokenPort(Protocol):
    def store_refresh_token(self, record: RefreshTokenRecord) -> None:
        ...

    def find_by_hash(self, *, token_hash: str) -> RefreshTokenRecord:
        """Raises RefreshTokenNotFoundError when no record matches."""
        ...

    def delete_by_hash(self, *, token_hash: str) -> bool:
        """True when this call removed the record."""
        ...

    def delete_all_by_user(self, *, user_id: str) -> None:
        ...

from __future__ import annotations

from sqlalchemy import text

from anchor_blog.application.ports.refresh_token_port import RefreshTokenPort
from anchor_blog.domain.entities.token import RefreshTokenRecord
from anchor_blog.domain.exceptions import RefreshTokenNotFoundError
from anchor_blog.infrastructure.db.errors import translate_db_errors
from anchor_blog.infrastructure.db.mappers.accounts_mapper import map_row_to_refresh_token


class SqlRefreshTokenRepository(RefreshTokenPort):
    def __init__(self, engine):
        self._engine = engine

    def store_refresh_token(self, record: RefreshTokenRecord) -> None:
        sql = """
            INSERT INTO public.refresh_tokens (
                id, user_id, token_hash, expires_at, created_at
            ) VALUES (
                :id, :user_id, :token_hash, :expires_at, :created_at
            )
        """
        # A duplicate hash means two identical tokens were minted; surface it as storage failure.
        with translate_db_errors("store_refresh_token"):
            with self._engine.begin() as conn:
                conn.execute(
                    text(sql),
                    {
                        "id": record.id,
                        "user_id": record.user_id,
                        "token_hash": record.token_hash,
                        "expires_at": record.expires_at,
                        "created_at": record.created_at,
                    },
                )

    def find_by_hash(self, *, token_hash: str) -> RefreshTokenRecord:
        sql = """
            SELECT id, user_id, token_hash, expires_at, created_at
            FROM public.refresh_tokens
            WHERE token_hash = :token_hash
            LIMIT 1
        """
        with translate_db_errors("find_refresh_token"):
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), {"token_hash": token_hash}).mappings().first()
        if row is None:
            raise RefreshTokenNotFoundError("Refresh token not found.")
        return map_row_to_refresh_token(row)

    def delete_by_hash(self, *, token_hash: str) -> bool:
        sql = """
            DELETE FROM public.refresh_tokens
            WHERE token_hash = :token_hash
            RETURNING id
        """
        with translate_db_errors("delete_refresh_token"):
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), {"token_hash": token_hash}).first()
        return row is not None

    def delete_all_by_user(self, *, user_id: str) -> None:
        sql = """
            DELETE FROM public.refresh_tokens
            WHERE user_id = :user_id
        """
        with translate_db_errors("delete_user_refresh_tokens"):
            with self._engine.begin() as conn:
                conn.execute(text(sql), {"user_id": user_id})

from __future__ import annotations

from datetime import datetime

from sqlalchemy import text

from anchor_blog.application.ports.one_time_token_port import OneTimeTokenPort
from anchor_blog.domain.entities.token import OneTimeToken, TokenPurpose
from anchor_blog.infrastructure.db.errors import translate_db_errors
from anchor_blog.infrastructure.db.mappers.accounts_mapper import map_row_to_one_time_token

TOKEN_TABLES = {
    TokenPurpose.ACTIVATION: "public.activation_tokens",
    TokenPurpose.PASSWORD_RESET: "public.password_reset_tokens",
}

TOKEN_COLUMNS = "id, user_id, token, expires_at, used, created_at"


class SqlOneTimeTokenRepository(OneTimeTokenPort):
    """One table per purpose; a token issued for one purpose is invisible to the other."""

    def __init__(self, engine, *, purpose: TokenPurpose):
        self._engine = engine
        self.purpose = TokenPurpose(purpose)
        self._table = TOKEN_TABLES[self.purpose]

    def create_token(self, token: OneTimeToken) -> None:
        if token.purpose != self.purpose:
            raise ValueError(f"Token purpose {token.purpose.value} does not match {self.purpose.value}.")
        sql = f"""
            INSERT INTO {self._table} (
                id, user_id, token, expires_at, used, created_at
            ) VALUES (
                :id, :user_id, :token, :expires_at, :used, :created_at
            )
        """
        with translate_db_errors(f"create_{self.purpose.value}_token"):
            with self._engine.begin() as conn:
                conn.execute(
                    text(sql),
                    {
                        "id": token.id,
                        "user_id": token.user_id,
                        "token": token.token,
                        "expires_at": token.expires_at,
                        "used": token.used,
                        "created_at": token.created_at,
                    },
                )

    def get_by_token(self, *, token: str) -> OneTimeToken | None:
        sql = f"""
            SELECT {TOKEN_COLUMNS}
            FROM {self._table}
            WHERE token = :token
            LIMIT 1
        """
        with translate_db_errors(f"get_{self.purpose.value}_token"):
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), {"token": token}).mappings().first()
        if row is None:
            return None
        return map_row_to_one_time_token(row, purpose=self.purpose)

    def mark_used(self, *, token: str, now: datetime) -> OneTimeToken | None:
        sql = build_mark_used_sql(self._table)
        with translate_db_errors(f"consume_{self.purpose.value}_token"):
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), {"token": token, "now": now}).mappings().first()
        if row is None:
            return None
        return map_row_to_one_time_token(row, purpose=self.purpose)


def build_mark_used_sql(table: str) -> str:
    # Single conditional UPDATE; concurrent consumers cannot both match.
    return f"""
        UPDATE {table}
        SET used = true
        WHERE token = :token
          AND used = false
          AND expires_at > :now
        RETURNING {TOKEN_COLUMNS}
    """

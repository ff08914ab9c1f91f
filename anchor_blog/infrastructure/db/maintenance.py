from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import text

from anchor_blog.infrastructure.db.errors import translate_db_errors
from anchor_blog.infrastructure.db.repositories.one_time_token_repository import TOKEN_TABLES

logger = logging.getLogger(__name__)


def purge_expired_tokens(engine, *, now: datetime) -> dict[str, int]:
    """Delete refresh and one-time tokens whose expiry is at or before ``now``.

    Returns the number of deleted rows per table.
    """
    tables = ["public.refresh_tokens", *TOKEN_TABLES.values()]
    deleted: dict[str, int] = {}
    with translate_db_errors("purge_expired_tokens"):
        with engine.begin() as conn:
            for table in tables:
                result = conn.execute(text(f"DELETE FROM {table} WHERE expires_at <= :now"), {"now": now})
                deleted[table] = int(result.rowcount or 0)
    logger.info("db: purged expired tokens counts=%s", deleted)
    return deleted

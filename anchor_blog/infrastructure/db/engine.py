from __future__ import annotations

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


@lru_cache(maxsize=4)
def get_engine(dsn: str, *, statement_timeout_ms: int = 5000, pool_timeout_seconds: float = 5.0):
    return create_engine(
        dsn,
        future=True,
        pool_pre_ping=True,
        pool_timeout=pool_timeout_seconds,
        connect_args={"options": f"-c statement_timeout={int(statement_timeout_ms)}"},
    )


def init_schema(engine) -> None:
    # Registers the tables on Base.metadata.
    from anchor_blog.infrastructure.db.models import accounts, posts  # noqa: F401

    Base.metadata.create_all(engine)

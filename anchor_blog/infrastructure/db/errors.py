from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from anchor_blog.domain.exceptions import DomainError, StorageError, StorageTimeoutError

logger = logging.getLogger(__name__)

QUERY_CANCELED_SQLSTATE = "57014"


def constraint_name(exc: IntegrityError, known: Mapping[str, object] | None = None) -> str | None:
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name
    message = str(exc.orig)
    for candidate in known or {}:
        if candidate in message:
            return candidate
    return None


def is_statement_timeout(exc: OperationalError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate == QUERY_CANCELED_SQLSTATE


@contextmanager
def translate_db_errors(
    operation: str,
    *,
    unique_violations: Mapping[str, Callable[[], DomainError]] | None = None,
) -> Iterator[None]:
    """Re-raise SQLAlchemy failures inside the block as domain errors.

    ``unique_violations`` maps a constraint name to the error raised when that
    constraint rejects a write. Anything else surfaces as ``StorageError``, and
    statement or pool timeouts as ``StorageTimeoutError``.
    """
    try:
        yield
    except IntegrityError as exc:
        name = constraint_name(exc, unique_violations)
        factory = (unique_violations or {}).get(name) if name else None
        if factory is not None:
            raise factory() from exc
        logger.error("db: integrity error operation=%s constraint=%s", operation, name)
        raise StorageError(f"Storage rejected {operation}.") from exc
    except PoolTimeoutError as exc:
        logger.warning("db: pool timeout operation=%s", operation)
        raise StorageTimeoutError(f"Timed out waiting for a connection during {operation}.") from exc
    except OperationalError as exc:
        if is_statement_timeout(exc):
            logger.warning("db: statement timeout operation=%s", operation)
            raise StorageTimeoutError(f"Storage timed out during {operation}.") from exc
        logger.exception("db: operational error operation=%s", operation)
        raise StorageError(f"Storage failed during {operation}.") from exc
    except SQLAlchemyError as exc:
        logger.exception("db: error operation=%s", operation)
        raise StorageError(f"Storage failed during {operation}.") from exc

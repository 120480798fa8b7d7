"""Shared repository plumbing"""

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pos_app.errors import StorageError

logger = structlog.get_logger()


@contextmanager
def storage_errors(operation: str, **context: Any) -> Iterator[None]:
    """Translate SQLAlchemy failures raised inside the block into StorageError"""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Storage operation failed", operation=operation, error=str(exc), **context)
        raise StorageError(f"{operation} failed", operation=operation, **context) from exc


class BaseRepository:
    """Repository bound to the session of the caller's unit of work"""

    def __init__(self, session: AsyncSession):
        self.session = session

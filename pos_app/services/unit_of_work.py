"""Unit of work spanning the customer, table and reservation repositories"""

from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import structlog

from pos_app.errors import StorageError
from pos_app.repositories.customers import CustomerRepository
from pos_app.repositories.reservations import ReservationRepository
from pos_app.repositories.tables import TableRepository

logger = structlog.get_logger()


class UnitOfWork:
    """
    One database transaction shared by every repository it exposes.

    Used as an async context manager: the transaction commits when the block
    exits cleanly and rolls back when it raises, so a multi-step write is
    applied completely or not at all.
    """

    customers: CustomerRepository
    tables: TableRepository
    reservations: ReservationRepository

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "UnitOfWork":
        self.session = self._session_factory()
        self.customers = CustomerRepository(self.session)
        self.tables = TableRepository(self.session)
        self.reservations = ReservationRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            await self.session.close()
            self.session = None

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            logger.error("Transaction commit failed", error=str(exc))
            await self.session.rollback()
            raise StorageError("Transaction commit failed") from exc

    async def rollback(self) -> None:
        await self.session.rollback()


def unit_of_work_factory(session_factory: async_sessionmaker) -> Callable[[], UnitOfWork]:
    """Bind a session factory so callers can open fresh units of work"""
    def factory() -> UnitOfWork:
        return UnitOfWork(session_factory)
    return factory

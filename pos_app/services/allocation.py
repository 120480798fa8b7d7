"""Table allocation for new and moved reservations"""

from datetime import date, time
from typing import List, Optional

import structlog

from pos_app.errors import InsufficientCapacity, TableNotFound, TableUnavailable
from pos_app.models.table import Table
from pos_app.services.availability import ConflictChecker
from pos_app.services.unit_of_work import UnitOfWork

logger = structlog.get_logger()


class TableAllocator:
    """
    Picks the table for a party.

    Every table examined on the booking path is row-locked before its
    conflict check, so two transactions racing for the same table
    serialize on that row until one of them commits.
    """

    def __init__(self, checker: Optional[ConflictChecker] = None):
        self.checker = checker or ConflictChecker()

    async def allocate(
        self,
        uow: UnitOfWork,
        pax: int,
        reservation_date: date,
        reservation_time: time,
        table_id: Optional[int] = None,
        exclude_reservation_id: Optional[int] = None,
    ) -> Table:
        if table_id:
            return await self._allocate_requested(
                uow, table_id, pax, reservation_date, reservation_time, exclude_reservation_id
            )
        return await self._auto_select(uow, pax, reservation_date, reservation_time)

    async def _allocate_requested(
        self,
        uow: UnitOfWork,
        table_id: int,
        pax: int,
        reservation_date: date,
        reservation_time: time,
        exclude_reservation_id: Optional[int],
    ) -> Table:
        table = await uow.tables.get(table_id, lock=True)
        if table is None:
            logger.warning("Specified table not found", table_id=table_id)
            raise TableNotFound(table_id=table_id)

        available = await self.checker.is_table_available(
            uow, table.id, reservation_date, reservation_time, exclude_reservation_id
        )
        if not available:
            logger.warning(
                "Table not available",
                table_id=table.id,
                date=reservation_date.isoformat(),
                time=reservation_time.strftime("%H:%M"),
            )
            raise TableUnavailable(
                f"Table {table.table_number} is not available at the requested time",
                table_id=table.id,
            )

        if table.capacity < pax:
            logger.warning("Table capacity insufficient", table_id=table.id, capacity=table.capacity, pax=pax)
            raise InsufficientCapacity(
                f"Table {table.table_number} seats {table.capacity}, party of {pax} requested",
                table_id=table.id,
            )

        return table

    async def _auto_select(
        self,
        uow: UnitOfWork,
        pax: int,
        reservation_date: date,
        reservation_time: time,
    ) -> Table:
        candidates = await uow.tables.find_by_capacity_at_least(pax)
        if not candidates:
            logger.warning("No tables with sufficient capacity", pax=pax)
            raise InsufficientCapacity(f"No table seats a party of {pax}")

        for candidate in candidates:
            table = await uow.tables.get(candidate.id, lock=True)
            if table is None:
                continue
            if await self.checker.is_table_available(uow, table.id, reservation_date, reservation_time):
                logger.debug("Table auto-selected", table_id=table.id, capacity=table.capacity, pax=pax)
                return table

        logger.warning(
            "No tables available at selected time",
            date=reservation_date.isoformat(),
            time=reservation_time.strftime("%H:%M"),
            pax=pax,
            candidates=len(candidates),
        )
        raise TableUnavailable(f"All tables seating {pax} are booked at the requested time")

    async def available_tables(
        self,
        uow: UnitOfWork,
        pax: int,
        reservation_date: date,
        reservation_time: time,
    ) -> List[Table]:
        """Capacity-sufficient tables free at the slot, smallest first"""
        tables = await uow.tables.find_by_capacity_at_least(pax)
        return [
            table for table in tables
            if await self.checker.is_table_available(uow, table.id, reservation_date, reservation_time)
        ]

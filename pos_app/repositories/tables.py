"""Table catalog repository"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select, func, update
from sqlalchemy.exc import IntegrityError
import structlog

from pos_app.errors import DuplicateTableNumber
from pos_app.models.table import Table, TableStatus
from pos_app.repositories.base import BaseRepository, storage_errors

logger = structlog.get_logger()


class TableRepository(BaseRepository):
    """Tables with their capacity and cached occupancy status"""

    async def get(self, table_id: int, lock: bool = False) -> Optional[Table]:
        """Load a table, optionally holding a row lock until the transaction ends"""
        query = select(Table).where(Table.id == table_id)
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)

        with storage_errors("get_table", table_id=table_id):
            result = await self.session.execute(query)
            return result.scalar_one_or_none()

    async def find_by_number(self, table_number: str) -> Optional[Table]:
        with storage_errors("find_table_by_number", table_number=table_number):
            result = await self.session.execute(
                select(Table).where(Table.table_number == table_number)
            )
            return result.scalar_one_or_none()

    async def find_by_capacity_at_least(self, min_capacity: int) -> List[Table]:
        """Tables seating at least ``min_capacity`` guests, smallest first"""
        logger.debug("Finding tables by capacity", min_capacity=min_capacity)

        with storage_errors("find_tables_by_capacity", min_capacity=min_capacity):
            result = await self.session.execute(
                select(Table)
                .where(Table.capacity >= min_capacity)
                .order_by(Table.capacity.asc(), Table.table_number.asc())
            )
            return list(result.scalars().all())

    async def find_all(
        self,
        status: Optional[TableStatus] = None,
        min_capacity: Optional[int] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Tuple[List[Table], int]:
        query = select(Table)
        count_query = select(func.count(Table.id))

        if status:
            query = query.where(Table.status == status)
            count_query = count_query.where(Table.status == status)

        if min_capacity:
            query = query.where(Table.capacity >= min_capacity)
            count_query = count_query.where(Table.capacity >= min_capacity)

        offset = (page - 1) * per_page
        query = query.order_by(Table.table_number.asc()).offset(offset).limit(per_page)

        with storage_errors("list_tables"):
            total = (await self.session.execute(count_query)).scalar()
            result = await self.session.execute(query)
            return list(result.scalars().all()), total

    async def create(self, table: Table) -> Table:
        table_number = table.table_number

        with storage_errors("create_table", table_number=table_number):
            try:
                self.session.add(table)
                await self.session.flush()
            except IntegrityError as exc:
                raise DuplicateTableNumber(
                    f"Table number {table_number} already exists",
                    table_number=table_number,
                ) from exc

        logger.info("Table created", table_id=table.id, table_number=table_number)
        return table

    async def update(self, table: Table) -> Table:
        # Read before flushing; a rejected flush expires the instance
        table_id = table.id
        table_number = table.table_number

        with storage_errors("update_table", table_id=table_id):
            try:
                await self.session.flush()
            except IntegrityError as exc:
                raise DuplicateTableNumber(
                    f"Table number {table_number} already exists",
                    table_id=table_id,
                    table_number=table_number,
                ) from exc
        return table

    async def update_status(self, table_id: int, status: TableStatus) -> None:
        with storage_errors("update_table_status", table_id=table_id):
            await self.session.execute(
                update(Table)
                .where(Table.id == table_id)
                .values(status=status, updated_at=datetime.utcnow())
            )

        logger.info("Table status updated", table_id=table_id, status=status.value)

"""Time-conflict checks between reservations on the same table"""

from datetime import date, time, timedelta
from typing import Optional

import structlog

from pos_app.errors import AvailabilityCheckFailed, StorageError
from pos_app.services.unit_of_work import UnitOfWork

logger = structlog.get_logger()

DEFAULT_CONFLICT_WINDOW = timedelta(hours=2)


class ConflictChecker:
    """
    Decides whether a table is free for a date and time of day.

    Uses a fixed turnover window rather than real seating durations: two
    active reservations on the same table and date conflict when their
    start times are strictly less than ``window`` apart.
    """

    def __init__(self, window: timedelta = DEFAULT_CONFLICT_WINDOW):
        self.window = window

    async def is_table_available(
        self,
        uow: UnitOfWork,
        table_id: int,
        reservation_date: date,
        reservation_time: time,
        exclude_reservation_id: Optional[int] = None,
    ) -> bool:
        try:
            return await uow.reservations.is_table_available(
                table_id,
                reservation_date,
                reservation_time,
                self.window,
                exclude_reservation_id=exclude_reservation_id,
            )
        except StorageError as exc:
            raise AvailabilityCheckFailed(table_id=table_id) from exc

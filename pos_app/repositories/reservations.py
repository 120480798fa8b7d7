"""Reservation repository"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import select, func, update
from sqlalchemy.exc import IntegrityError
import structlog

from pos_app.errors import TableUnavailable
from pos_app.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from pos_app.repositories.base import BaseRepository, storage_errors

logger = structlog.get_logger()


def _seconds_of_day(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


class ReservationRepository(BaseRepository):
    """Reservation records; soft-deleted rows are invisible to every query"""

    async def create(self, reservation: Reservation) -> Reservation:
        # A failed flush expires the instance, so keep what the error needs
        table_id = reservation.table_id

        logger.info(
            "Creating reservation",
            customer_id=reservation.customer_id,
            table_id=table_id,
            date=reservation.reservation_date.isoformat(),
        )

        with storage_errors("create_reservation", table_id=table_id):
            try:
                self.session.add(reservation)
                await self.session.flush()
            except IntegrityError as exc:
                # Partial unique index on the active slot
                raise TableUnavailable(
                    "Table was booked for this slot by a concurrent request",
                    table_id=table_id,
                ) from exc

        return reservation

    async def get(self, reservation_id: int, lock: bool = False) -> Optional[Reservation]:
        query = select(Reservation).where(
            Reservation.id == reservation_id,
            Reservation.deleted_at.is_(None),
        )
        if lock:
            query = query.with_for_update(of=Reservation).execution_options(populate_existing=True)

        with storage_errors("get_reservation", reservation_id=reservation_id):
            result = await self.session.execute(query)
            return result.scalar_one_or_none()

    async def find_all(
        self,
        reservation_date: Optional[date] = None,
        status: Optional[ReservationStatus] = None,
        customer_id: Optional[int] = None,
        table_id: Optional[int] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Tuple[List[Reservation], int]:
        """Filtered page of reservations, latest slot first, with the total match count"""
        conditions = [Reservation.deleted_at.is_(None)]

        if reservation_date:
            conditions.append(Reservation.reservation_date == reservation_date)
        if status:
            conditions.append(Reservation.status == status)
        if customer_id:
            conditions.append(Reservation.customer_id == customer_id)
        if table_id:
            conditions.append(Reservation.table_id == table_id)

        count_query = select(func.count(Reservation.id)).where(*conditions)

        offset = (page - 1) * per_page
        query = (
            select(Reservation)
            .where(*conditions)
            .order_by(
                Reservation.reservation_date.desc(),
                Reservation.reservation_time.desc(),
                Reservation.id.desc(),
            )
            .offset(offset)
            .limit(per_page)
        )

        with storage_errors("list_reservations"):
            total = (await self.session.execute(count_query)).scalar()
            result = await self.session.execute(query)
            reservations = list(result.scalars().all())

        logger.debug("Reservations retrieved", count=len(reservations), total=total)
        return reservations, total

    async def update(self, reservation: Reservation) -> Reservation:
        reservation_id = reservation.id
        table_id = reservation.table_id

        with storage_errors("update_reservation", reservation_id=reservation_id):
            try:
                await self.session.flush()
            except IntegrityError as exc:
                raise TableUnavailable(
                    "Table was booked for this slot by a concurrent request",
                    reservation_id=reservation_id,
                    table_id=table_id,
                ) from exc

        logger.info("Reservation updated", reservation_id=reservation_id, status=reservation.status.value)
        return reservation

    async def update_status(self, reservation_id: int, status: ReservationStatus) -> None:
        with storage_errors("update_reservation_status", reservation_id=reservation_id):
            await self.session.execute(
                update(Reservation)
                .where(Reservation.id == reservation_id)
                .values(status=status, updated_at=datetime.utcnow())
            )

        logger.info("Reservation status updated", reservation_id=reservation_id, status=status.value)

    async def is_table_available(
        self,
        table_id: int,
        reservation_date: date,
        reservation_time: time,
        window: timedelta,
        exclude_reservation_id: Optional[int] = None,
    ) -> bool:
        """
        True unless an active reservation on the same table and date starts
        strictly less than ``window`` away from ``reservation_time``.
        """
        query = select(Reservation.id, Reservation.reservation_time).where(
            Reservation.table_id == table_id,
            Reservation.reservation_date == reservation_date,
            Reservation.status.in_(list(ACTIVE_STATUSES)),
            Reservation.deleted_at.is_(None),
        )
        if exclude_reservation_id is not None:
            query = query.where(Reservation.id != exclude_reservation_id)

        with storage_errors("check_table_availability", table_id=table_id):
            result = await self.session.execute(query)
            booked = result.all()

        requested = _seconds_of_day(reservation_time)
        limit = window.total_seconds()
        conflicting = [
            row.id for row in booked
            if abs(_seconds_of_day(row.reservation_time) - requested) < limit
        ]

        logger.debug(
            "Table availability result",
            table_id=table_id,
            date=reservation_date.isoformat(),
            time=reservation_time.strftime("%H:%M"),
            available=not conflicting,
            conflicting=conflicting,
        )
        return not conflicting

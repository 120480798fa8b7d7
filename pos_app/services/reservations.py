"""
Reservation lifecycle management.

``ReservationManager`` is the single entry point for booking, status
transitions, cancellation and check-in. Each write opens one unit of work
and passes it explicitly to the customer resolver, table allocator and
repositories, so the reservation row and the table status it implies are
committed together or not at all.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError
import structlog

from pos_app.errors import (
    InvalidDateFormat,
    InvalidReservationTime,
    InvalidStatus,
    InvalidStatusTransition,
    InvalidTimeFormat,
    ReservationNotFound,
    ValidationFailed,
)
from pos_app.models.reservation import Reservation, ReservationStatus
from pos_app.models.table import Table, TableStatus
from pos_app.schemas.reservation import ReservationCreate
from pos_app.services.allocation import TableAllocator
from pos_app.services.clock import Clock, SystemClock
from pos_app.services.customers import CustomerResolver
from pos_app.services.unit_of_work import UnitOfWork

logger = structlog.get_logger()

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
TIME_PATTERN = re.compile(r"\d{2}:\d{2}")
MAX_CANCEL_REASON_LENGTH = 500
DEFAULT_MIN_LEAD_TIME = timedelta(hours=1)


def parse_reservation_date(value: Any) -> date:
    # strptime alone accepts single-digit fields such as 2030-6-2
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        logger.warning("Invalid reservation date format", date=value)
        raise InvalidDateFormat(f"Invalid date '{value}', expected YYYY-MM-DD", date=value)
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        logger.warning("Invalid reservation date format", date=value)
        raise InvalidDateFormat(f"Invalid date '{value}', expected YYYY-MM-DD", date=value) from exc


def parse_reservation_time(value: Any) -> time:
    if not isinstance(value, str) or not TIME_PATTERN.fullmatch(value):
        logger.warning("Invalid reservation time format", time=value)
        raise InvalidTimeFormat(f"Invalid time '{value}', expected HH:MM", time=value)
    try:
        return datetime.strptime(value, TIME_FORMAT).time()
    except ValueError as exc:
        logger.warning("Invalid reservation time format", time=value)
        raise InvalidTimeFormat(f"Invalid time '{value}', expected HH:MM", time=value) from exc


def parse_status(value: Any) -> ReservationStatus:
    try:
        return ReservationStatus(value)
    except ValueError as exc:
        logger.warning("Invalid reservation status", status=value)
        raise InvalidStatus(f"Unknown reservation status '{value}'", status=value) from exc


def _field_errors(exc: ValidationError) -> List[dict]:
    return [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]


class ReservationManager:
    """Orchestrates reservation writes and enforces the status state machine"""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Optional[Clock] = None,
        resolver: Optional[CustomerResolver] = None,
        allocator: Optional[TableAllocator] = None,
        min_lead_time: timedelta = DEFAULT_MIN_LEAD_TIME,
    ):
        self._uow_factory = uow_factory
        self.clock = clock or SystemClock()
        self.resolver = resolver or CustomerResolver()
        self.allocator = allocator or TableAllocator()
        self.min_lead_time = min_lead_time

    async def create(self, payload: Union[ReservationCreate, Mapping[str, Any]]) -> Reservation:
        """Book a table for a customer and return the reservation in ``awaiting``"""
        request = self._validate_create(payload)
        details = request.reservation

        logger.info(
            "Creating new reservation",
            customer_name=request.customer.first_name,
            pax=details.pax_number,
            table_id=details.table_id,
        )

        reservation_date = parse_reservation_date(details.reservation_date)
        reservation_time = parse_reservation_time(details.reservation_time)
        self._ensure_bookable(reservation_date, reservation_time)

        async with self._uow_factory() as uow:
            customer = await self.resolver.resolve(uow, request.customer)
            table = await self.allocator.allocate(
                uow,
                details.pax_number,
                reservation_date,
                reservation_time,
                table_id=details.table_id,
            )

            reservation = await uow.reservations.create(
                Reservation(
                    customer_id=customer.id,
                    table_id=table.id,
                    pax_number=details.pax_number,
                    reservation_date=reservation_date,
                    reservation_time=reservation_time,
                    status=ReservationStatus.AWAITING,
                    notes=details.notes,
                )
            )
            await uow.tables.update_status(table.id, TableStatus.RESERVED)
            reservation_id = reservation.id

        logger.info(
            "Reservation created",
            reservation_id=reservation_id,
            customer_id=customer.id,
            table_id=table.id,
            table_number=table.table_number,
        )
        return await self.get(reservation_id)

    async def get(self, reservation_id: int) -> Reservation:
        async with self._uow_factory() as uow:
            reservation = await uow.reservations.get(reservation_id)

        if reservation is None:
            logger.warning("Reservation not found", reservation_id=reservation_id)
            raise ReservationNotFound(f"Reservation {reservation_id} not found", reservation_id=reservation_id)
        return reservation

    async def list_reservations(
        self,
        reservation_date: Optional[str] = None,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
        table_id: Optional[int] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Tuple[List[Reservation], int]:
        filters = {
            "reservation_date": parse_reservation_date(reservation_date) if reservation_date else None,
            "status": parse_status(status) if status else None,
            "customer_id": customer_id,
            "table_id": table_id,
        }

        async with self._uow_factory() as uow:
            return await uow.reservations.find_all(page=max(page, 1), per_page=max(per_page, 1), **filters)

    async def update_status(
        self,
        reservation_id: int,
        status: Union[str, ReservationStatus],
        table_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Reservation:
        """
        Move a reservation along an allowed edge of the state machine.

        Terminal states free the table; ``completed`` also records the
        check-out time. ``table_id`` moves an active reservation to another
        table, which must pass the same checks as an explicit booking.
        """
        new_status = parse_status(status)
        logger.info("Updating reservation status", reservation_id=reservation_id, status=new_status.value)

        async with self._uow_factory() as uow:
            reservation = await self._load_for_update(uow, reservation_id)
            current = ReservationStatus(reservation.status)
            self._ensure_transition(reservation, current, new_status)

            if table_id and table_id != reservation.table_id:
                if not new_status.is_active:
                    raise ValidationFailed(
                        "A table can only be reassigned while the reservation stays active",
                        errors=[{"loc": ["table_id"], "msg": "reassignment requires an active status", "type": "value_error"}],
                    )
                await self._move_table(uow, reservation, table_id)

            await uow.reservations.update_status(reservation.id, new_status)

            if notes is not None:
                reservation.notes = notes
            if new_status == ReservationStatus.COMPLETED:
                reservation.checked_out_at = self.clock.now()
            await uow.reservations.update(reservation)

            if not new_status.is_active:
                await uow.tables.update_status(reservation.table_id, TableStatus.AVAILABLE)

        logger.info(
            "Reservation status updated",
            reservation_id=reservation_id,
            previous=current.value,
            status=new_status.value,
        )
        return await self.get(reservation_id)

    async def cancel(self, reservation_id: int, reason: Optional[str] = None) -> Reservation:
        """Cancel an active reservation, recording the reason in its notes"""
        if reason is not None and len(reason) > MAX_CANCEL_REASON_LENGTH:
            raise ValidationFailed(
                "Cancellation reason is too long",
                errors=[{"loc": ["reason"], "msg": f"at most {MAX_CANCEL_REASON_LENGTH} characters", "type": "string_too_long"}],
            )

        logger.info("Cancelling reservation", reservation_id=reservation_id, reason=reason)

        async with self._uow_factory() as uow:
            reservation = await self._load_for_update(uow, reservation_id)
            current = ReservationStatus(reservation.status)
            self._ensure_transition(reservation, current, ReservationStatus.CANCELLED)

            reservation.status = ReservationStatus.CANCELLED
            if reason:
                line = f"Cancellation reason: {reason}"
                reservation.notes = f"{reservation.notes}\n{line}" if reservation.notes else line
            await uow.reservations.update(reservation)

            await uow.tables.update_status(reservation.table_id, TableStatus.AVAILABLE)

        logger.info("Reservation cancelled", reservation_id=reservation_id)
        return await self.get(reservation_id)

    async def check_in(self, reservation_id: int) -> Reservation:
        """Seat the party of a confirmed reservation"""
        logger.info("Checking in reservation", reservation_id=reservation_id)

        async with self._uow_factory() as uow:
            reservation = await self._load_for_update(uow, reservation_id)

            if reservation.status != ReservationStatus.CONFIRMED:
                logger.warning(
                    "Cannot check in reservation in current status",
                    reservation_id=reservation_id,
                    status=reservation.status.value,
                )
                raise InvalidStatusTransition(
                    f"Only confirmed reservations can be checked in, this one is {reservation.status.value}",
                    reservation_id=reservation_id,
                )
            if reservation.checked_in_at is not None:
                raise InvalidStatusTransition(
                    "Reservation is already checked in",
                    reservation_id=reservation_id,
                )

            reservation.checked_in_at = self.clock.now()
            await uow.reservations.update(reservation)
            await uow.tables.update_status(reservation.table_id, TableStatus.OCCUPIED)

        logger.info("Reservation checked in", reservation_id=reservation_id)
        return await self.get(reservation_id)

    async def available_tables(self, reservation_date: str, reservation_time: str, pax: int) -> List[Table]:
        """Tables that could take a party of ``pax`` at the slot; never mutates"""
        parsed_date = parse_reservation_date(reservation_date)
        parsed_time = parse_reservation_time(reservation_time)
        if pax is None or pax < 1:
            raise ValidationFailed(
                "pax must be a positive integer",
                errors=[{"loc": ["pax"], "msg": "must be a positive integer", "type": "greater_than_equal"}],
            )

        async with self._uow_factory() as uow:
            tables = await self.allocator.available_tables(uow, pax, parsed_date, parsed_time)

        logger.debug("Available tables found", count=len(tables), pax=pax)
        return tables

    def _validate_create(self, payload: Union[ReservationCreate, Mapping[str, Any]]) -> ReservationCreate:
        if isinstance(payload, ReservationCreate):
            return payload
        try:
            return ReservationCreate.model_validate(payload)
        except ValidationError as exc:
            errors = _field_errors(exc)
            logger.warning("Reservation validation failed", errors=errors)
            raise ValidationFailed(errors=errors) from exc

    def _ensure_bookable(self, reservation_date: date, reservation_time: time) -> None:
        requested_at = datetime.combine(reservation_date, reservation_time)
        earliest = self.clock.now() + self.min_lead_time
        if requested_at <= earliest:
            logger.warning(
                "Invalid reservation time",
                requested_at=requested_at.isoformat(),
                earliest=earliest.isoformat(),
            )
            raise InvalidReservationTime(requested_at=requested_at.isoformat())

    def _ensure_transition(
        self,
        reservation: Reservation,
        current: ReservationStatus,
        target: ReservationStatus,
    ) -> None:
        if not current.can_transition_to(target):
            logger.warning(
                "Invalid status transition",
                reservation_id=reservation.id,
                previous=current.value,
                status=target.value,
            )
            raise InvalidStatusTransition(
                f"Cannot change reservation from {current.value} to {target.value}",
                reservation_id=reservation.id,
            )

    async def _load_for_update(self, uow: UnitOfWork, reservation_id: int) -> Reservation:
        reservation = await uow.reservations.get(reservation_id, lock=True)
        if reservation is None:
            logger.warning("Reservation not found", reservation_id=reservation_id)
            raise ReservationNotFound(f"Reservation {reservation_id} not found", reservation_id=reservation_id)
        return reservation

    async def _move_table(self, uow: UnitOfWork, reservation: Reservation, table_id: int) -> None:
        previous_table_id = reservation.table_id

        # Lock both tables in id order so opposite moves cannot deadlock
        for locked_id in sorted({previous_table_id, table_id}):
            await uow.tables.get(locked_id, lock=True)

        table = await self.allocator.allocate(
            uow,
            reservation.pax_number,
            reservation.reservation_date,
            reservation.reservation_time,
            table_id=table_id,
            exclude_reservation_id=reservation.id,
        )
        reservation.table_id = table.id
        reservation.table = table
        # Flush now so a lost race on the slot index surfaces as TableUnavailable
        await uow.reservations.update(reservation)

        await uow.tables.update_status(previous_table_id, TableStatus.AVAILABLE)
        seated = reservation.checked_in_at is not None
        await uow.tables.update_status(table.id, TableStatus.OCCUPIED if seated else TableStatus.RESERVED)

        logger.info(
            "Reservation moved to another table",
            reservation_id=reservation.id,
            previous_table_id=previous_table_id,
            table_id=table.id,
        )

"""Reservation model and lifecycle states"""

from datetime import datetime
from typing import Dict, FrozenSet
from sqlalchemy import Column, Integer, Date, Time, DateTime, Enum, ForeignKey, Index, Text, text
from sqlalchemy.orm import relationship
import enum

from pos_app.database import Base


class ReservationStatus(str, enum.Enum):
    """Reservation lifecycle states"""
    AWAITING = "awaiting"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]

    def can_transition_to(self, target: "ReservationStatus") -> bool:
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    ReservationStatus.AWAITING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.COMPLETED, ReservationStatus.CANCELLED}),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
}

# Reservations in these states hold their table within the conflict window
ACTIVE_STATUSES = frozenset({ReservationStatus.AWAITING, ReservationStatus.CONFIRMED})

_ACTIVE_SLOT_PREDICATE = text("status IN ('awaiting', 'confirmed') AND deleted_at IS NULL")


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"
    __table_args__ = (
        # Last line of defence against two active bookings of the same slot
        Index(
            "uq_reservations_active_table_slot",
            "table_id",
            "reservation_date",
            "reservation_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_PREDICATE,
            sqlite_where=_ACTIVE_SLOT_PREDICATE,
        ),
        Index("ix_reservations_table_date", "table_id", "reservation_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    table_id = Column(Integer, ForeignKey("tables.id"), nullable=False)

    # Reservation details
    pax_number = Column(Integer, nullable=False)
    reservation_date = Column(Date, nullable=False)
    reservation_time = Column(Time, nullable=False)
    deposit_fee_cents = Column(Integer, nullable=False, default=0)

    # Status
    status = Column(
        Enum(ReservationStatus, name="reservation_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ReservationStatus.AWAITING,
    )

    # Notes
    notes = Column(Text)

    # Seating, restaurant-local wall time from the service clock, comparable
    # with reservation_date and reservation_time
    checked_in_at = Column(DateTime)
    checked_out_at = Column(DateTime)

    # Metadata, UTC
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime)

    # Relationships
    customer = relationship("Customer", back_populates="reservations", lazy="selectin")
    table = relationship("Table", back_populates="reservations", lazy="selectin")

    @property
    def is_active(self) -> bool:
        return ReservationStatus(self.status).is_active

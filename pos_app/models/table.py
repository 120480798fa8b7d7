"""Dining table model"""

from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Enum, CheckConstraint
from sqlalchemy.orm import relationship
import enum

from pos_app.database import Base


class TableStatus(str, enum.Enum):
    """Cached view of whether a table is committed to a reservation"""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"


class Table(Base):
    """Dining tables in the restaurant floor plan"""
    __tablename__ = "tables"
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_tables_capacity_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    table_number = Column(String(20), unique=True, nullable=False)
    capacity = Column(Integer, nullable=False)

    # Written only by the reservation lifecycle
    status = Column(
        Enum(TableStatus, name="table_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TableStatus.AVAILABLE,
    )

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    reservations = relationship("Reservation", back_populates="table")

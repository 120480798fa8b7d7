"""Customer model"""

from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Enum
from sqlalchemy.orm import relationship
import enum

from pos_app.database import Base


class CustomerTitle(str, enum.Enum):
    """Honorific used when addressing the guest"""
    MR = "Mr"
    MRS = "Mrs"
    MS = "Ms"
    DR = "Dr"
    PROF = "Prof"


class Customer(Base):
    """Guests who book tables, deduplicated by phone number"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(
        Enum(CustomerTitle, name="customer_title", values_callable=lambda e: [m.value for m in e])
    )
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100))
    phone = Column(String(20), unique=True, nullable=False)  # Natural key, first write wins
    email = Column(String(255))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    reservations = relationship("Reservation", back_populates="customer")

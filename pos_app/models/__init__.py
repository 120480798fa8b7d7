"""Database models"""

from pos_app.models.customer import Customer, CustomerTitle
from pos_app.models.table import Table, TableStatus
from pos_app.models.reservation import Reservation, ReservationStatus, ALLOWED_TRANSITIONS, ACTIVE_STATUSES
from pos_app.models.user import User, UserRole

__all__ = [
    "Customer",
    "CustomerTitle",
    "Table",
    "TableStatus",
    "Reservation",
    "ReservationStatus",
    "ALLOWED_TRANSITIONS",
    "ACTIVE_STATUSES",
    "User",
    "UserRole",
]

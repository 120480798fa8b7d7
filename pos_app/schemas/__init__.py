"""Pydantic schemas for request/response validation"""

from pos_app.schemas.auth import (
    Token,
    UserResponse,
)
from pos_app.schemas.customer import (
    CustomerContact,
    CustomerResponse,
)
from pos_app.schemas.table import (
    TableCreate,
    TableUpdate,
    TableResponse,
    TableListResponse,
)
from pos_app.schemas.reservation import (
    ReservationDetails,
    ReservationCreate,
    ReservationStatusUpdate,
    ReservationCancel,
    ReservationResponse,
    ReservationListResponse,
)

__all__ = [
    "Token",
    "UserResponse",
    "CustomerContact",
    "CustomerResponse",
    "TableCreate",
    "TableUpdate",
    "TableResponse",
    "TableListResponse",
    "ReservationDetails",
    "ReservationCreate",
    "ReservationStatusUpdate",
    "ReservationCancel",
    "ReservationResponse",
    "ReservationListResponse",
]

"""Reservation schemas"""

from datetime import date, datetime, time
from typing import Optional, List
from pydantic import BaseModel, Field, field_serializer

from pos_app.models.reservation import ReservationStatus
from pos_app.schemas.customer import CustomerContact, CustomerResponse
from pos_app.schemas.table import TableResponse


class ReservationDetails(BaseModel):
    """Reservation block of a create request"""
    pax_number: int = Field(..., ge=1, le=20)
    reservation_date: str  # YYYY-MM-DD
    reservation_time: str  # HH:MM, 24-hour
    table_id: Optional[int] = Field(None, ge=0)  # 0 or missing selects a table automatically
    notes: Optional[str] = None


class ReservationCreate(BaseModel):
    """Create reservation request"""
    customer: CustomerContact
    reservation: ReservationDetails


class ReservationStatusUpdate(BaseModel):
    """Update reservation status request"""
    status: str
    table_id: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None


class ReservationCancel(BaseModel):
    """Cancel reservation request"""
    reason: Optional[str] = Field(None, max_length=500)


class ReservationResponse(BaseModel):
    """Reservation response with customer and table expanded"""
    id: int
    customer: CustomerResponse
    table: TableResponse
    pax_number: int
    reservation_date: date
    reservation_time: time
    deposit_fee_cents: int
    status: ReservationStatus
    notes: Optional[str]
    checked_in_at: Optional[datetime]
    checked_out_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @field_serializer("reservation_time")
    def serialize_reservation_time(self, value: time) -> str:
        return value.strftime("%H:%M")

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    """Paginated reservation list"""
    items: List[ReservationResponse]
    total: int
    page: int
    per_page: int
    total_pages: int

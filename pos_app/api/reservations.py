"""Reservation management API endpoints"""

import math
from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from pos_app.api.auth import get_current_active_user
from pos_app.config import settings
from pos_app.database import SessionLocal
from pos_app.models.user import User
from pos_app.schemas.reservation import (
    ReservationCreate,
    ReservationStatusUpdate,
    ReservationCancel,
    ReservationResponse,
    ReservationListResponse,
)
from pos_app.schemas.table import TableResponse
from pos_app.services.allocation import TableAllocator
from pos_app.services.availability import ConflictChecker
from pos_app.services.clock import SystemClock
from pos_app.services.reservations import ReservationManager
from pos_app.services.unit_of_work import unit_of_work_factory

router = APIRouter()


def get_reservation_manager() -> ReservationManager:
    """Wire the reservation manager against the application database"""
    checker = ConflictChecker(window=timedelta(minutes=settings.conflict_window_minutes))
    return ReservationManager(
        unit_of_work_factory(SessionLocal),
        clock=SystemClock(settings.restaurant_timezone),
        allocator=TableAllocator(checker),
        min_lead_time=timedelta(minutes=settings.reservation_min_lead_minutes),
    )


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    reservation_data: ReservationCreate,
    current_user: User = Depends(get_current_active_user),
    manager: ReservationManager = Depends(get_reservation_manager),
):
    """Create a new reservation, allocating a table when none is requested"""
    return await manager.create(reservation_data)


@router.get("", response_model=ReservationListResponse)
async def list_reservations(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    date: Optional[str] = None,
    status: Optional[str] = None,
    customer_id: Optional[int] = None,
    table_id: Optional[int] = None,
    current_user: User = Depends(get_current_active_user),
    manager: ReservationManager = Depends(get_reservation_manager),
):
    """List reservations with pagination, newest slot first"""
    reservations, total = await manager.list_reservations(
        reservation_date=date,
        status=status,
        customer_id=customer_id,
        table_id=table_id,
        page=page,
        per_page=per_page,
    )

    return ReservationListResponse(
        items=reservations,
        total=total,
        page=page,
        per_page=per_page,
        total_pages=math.ceil(total / per_page) if total else 0,
    )


@router.get("/available-tables", response_model=List[TableResponse])
async def get_available_tables(
    date: str,
    time: str,
    pax: int = Query(..., ge=1),
    current_user: User = Depends(get_current_active_user),
    manager: ReservationManager = Depends(get_reservation_manager),
):
    """Tables that can seat the party at the requested slot"""
    return await manager.available_tables(date, time, pax)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: int,
    current_user: User = Depends(get_current_active_user),
    manager: ReservationManager = Depends(get_reservation_manager),
):
    """Get reservation details"""
    return await manager.get(reservation_id)


@router.patch("/{reservation_id}/status", response_model=ReservationResponse)
async def update_reservation_status(
    reservation_id: int,
    status_data: ReservationStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    manager: ReservationManager = Depends(get_reservation_manager),
):
    """Move a reservation to a new status"""
    return await manager.update_status(
        reservation_id,
        status_data.status,
        table_id=status_data.table_id,
        notes=status_data.notes,
    )


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: int,
    cancel_data: Optional[ReservationCancel] = None,
    current_user: User = Depends(get_current_active_user),
    manager: ReservationManager = Depends(get_reservation_manager),
):
    """Cancel a reservation and free its table"""
    reason = cancel_data.reason if cancel_data else None
    return await manager.cancel(reservation_id, reason)


@router.post("/{reservation_id}/check-in", response_model=ReservationResponse)
async def check_in_reservation(
    reservation_id: int,
    current_user: User = Depends(get_current_active_user),
    manager: ReservationManager = Depends(get_reservation_manager),
):
    """Seat a confirmed reservation"""
    return await manager.check_in(reservation_id)

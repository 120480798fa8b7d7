"""Table catalog API endpoints"""

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pos_app.api.auth import get_current_active_user, require_role
from pos_app.config import settings
from pos_app.database import get_db
from pos_app.errors import TableNotFound
from pos_app.models.table import Table, TableStatus
from pos_app.models.user import User, UserRole
from pos_app.repositories.tables import TableRepository
from pos_app.schemas.table import TableCreate, TableUpdate, TableResponse, TableListResponse

router = APIRouter()
logger = structlog.get_logger()


@router.get("", response_model=TableListResponse)
async def list_tables(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status: Optional[TableStatus] = None,
    min_capacity: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List tables ordered by table number"""
    tables, total = await TableRepository(db).find_all(
        status=status,
        min_capacity=min_capacity,
        page=page,
        per_page=per_page,
    )

    return TableListResponse(
        items=tables,
        total=total,
        page=page,
        per_page=per_page,
        total_pages=math.ceil(total / per_page) if total else 0,
    )


@router.post("", response_model=TableResponse, status_code=201)
async def create_table(
    table_data: TableCreate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Add a table to the floor plan"""
    table = await TableRepository(db).create(
        Table(
            table_number=table_data.table_number,
            capacity=table_data.capacity,
            status=TableStatus.AVAILABLE,
        )
    )
    await db.commit()
    await db.refresh(table)

    return table


@router.get("/{table_id}", response_model=TableResponse)
async def get_table(
    table_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get table details"""
    table = await TableRepository(db).get(table_id)

    if not table:
        raise TableNotFound(table_id=table_id)

    return table


@router.put("/{table_id}", response_model=TableResponse)
async def update_table(
    table_id: int,
    table_data: TableUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Rename or resize a table"""
    repo = TableRepository(db)
    table = await repo.get(table_id)

    if not table:
        raise TableNotFound(table_id=table_id)

    for field, value in table_data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(table, field, value)

    await repo.update(table)
    await db.commit()
    await db.refresh(table)

    logger.info("Table updated", table_id=table.id, table_number=table.table_number, capacity=table.capacity)
    return table

"""Table schemas"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from pos_app.models.table import TableStatus


class TableCreate(BaseModel):
    """Create table request"""
    table_number: str = Field(..., min_length=1, max_length=20)
    capacity: int = Field(..., ge=1, le=20)


class TableUpdate(BaseModel):
    """Update table request; status is owned by the reservation lifecycle"""
    table_number: Optional[str] = Field(None, min_length=1, max_length=20)
    capacity: Optional[int] = Field(None, ge=1, le=20)


class TableResponse(BaseModel):
    """Table response"""
    id: int
    table_number: str
    capacity: int
    status: TableStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TableListResponse(BaseModel):
    """Paginated table list"""
    items: List[TableResponse]
    total: int
    page: int
    per_page: int
    total_pages: int

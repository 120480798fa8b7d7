"""Customer schemas"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from pos_app.models.customer import CustomerTitle


class CustomerContact(BaseModel):
    """Contact block of a reservation request"""
    title: Optional[CustomerTitle] = None
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: str = Field(..., min_length=1, max_length=20)
    email: Optional[EmailStr] = None

    @field_validator("title", "last_name", "email", mode="before")
    @classmethod
    def blank_as_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    class Config:
        str_strip_whitespace = True


class CustomerResponse(BaseModel):
    """Customer response"""
    id: int
    title: Optional[CustomerTitle]
    first_name: str
    last_name: Optional[str]
    phone: str
    email: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

"""
API schemas for clients, services and staff
"""

from sqlmodel import SQLModel, Field
from decimal import Decimal
from typing import Optional

from agenda.models.user import UserRole


class ClientCreate(SQLModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=2000)


class ServiceCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    duration_minutes: int = Field(gt=0)
    price: Decimal = Field(default=Decimal("0.00"), ge=0)


class UserCreate(SQLModel):
    email: str = Field(max_length=255)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)
    role: UserRole = Field(default=UserRole.EMPLOYEE)

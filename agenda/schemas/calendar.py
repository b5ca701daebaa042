"""
API schemas for working hours and days off
"""

from sqlmodel import SQLModel, Field
from datetime import date, time
from typing import Optional


class WorkingHoursSet(SQLModel):
    weekday: int = Field(ge=0, le=6, description="0=Monday..6=Sunday")
    opens_at: time
    closes_at: time
    is_active: bool = True


class WorkingHoursUpdate(SQLModel):
    weekday: Optional[int] = Field(default=None, ge=0, le=6)
    opens_at: Optional[time] = None
    closes_at: Optional[time] = None
    is_active: Optional[bool] = None


class DayOffCreate(SQLModel):
    day: date
    reason: Optional[str] = Field(default=None, max_length=255)

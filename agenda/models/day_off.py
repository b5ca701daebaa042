"""
Day-off exception: a date with no availability regardless of working hours
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import date, datetime
from typing import Optional
import uuid


class DayOff(SQLModel, table=True):
    """Holiday, vacation or closure of a tenant"""

    __tablename__ = "days_off"
    __table_args__ = (
        UniqueConstraint("tenant_id", "day", name="uq_day_off_tenant_day"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")

    day: date = Field(index=True)
    reason: Optional[str] = Field(default=None, max_length=255)

    created_at: datetime = Field(default_factory=datetime.utcnow)

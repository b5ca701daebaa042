"""
Working hours per tenant and weekday
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import datetime, time
from typing import Optional
import uuid


WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class WorkingHours(SQLModel, table=True):
    """Opening window of a weekday, 0=Monday..6=Sunday"""

    __tablename__ = "working_hours"
    __table_args__ = (
        UniqueConstraint("tenant_id", "weekday", name="uq_working_hours_tenant_weekday"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")

    weekday: int = Field(ge=0, le=6)
    opens_at: time
    closes_at: time
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    def overlaps(self, opens_at: time, closes_at: time) -> bool:
        return opens_at < self.closes_at and closes_at > self.opens_at

    def describe(self) -> str:
        return f"{self.opens_at:%H:%M}-{self.closes_at:%H:%M}"

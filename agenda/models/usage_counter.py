"""
Usage counters per tenant and billing period
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import date, datetime
from typing import Optional
import uuid


def period_key(day: date) -> str:
    """Billing period key, e.g. 2026-10"""
    return f"{day.year:04d}-{day.month:02d}"


class UsageCounter(SQLModel, table=True):
    """Cached counts, recomputed from authoritative sources after each write"""

    __tablename__ = "usage_counters"
    __table_args__ = (
        UniqueConstraint("tenant_id", "period", name="uq_usage_tenant_period"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")
    period: str = Field(max_length=7, index=True, description="YYYY-MM")

    total_users: int = Field(default=0)
    total_clients: int = Field(default=0)
    total_appointments_month: int = Field(default=0)
    total_services: int = Field(default=0)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

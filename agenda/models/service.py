"""
Service catalog model (haircut, consultation, ...)
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, Numeric
from datetime import datetime
from typing import Optional
from decimal import Decimal
from enum import Enum
import uuid


class ServiceStatus(str, Enum):
    """Lifecycle of a catalog entry (services are never deleted)"""
    ACTIVE = "active"
    INACTIVE = "inactive"


class Service(SQLModel, table=True):
    """Bookable service with its duration and list price"""

    __tablename__ = "services"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")

    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    duration_minutes: int = Field(gt=0, description="Time the service occupies on the calendar")
    price: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False),
    )

    status: ServiceStatus = Field(default=ServiceStatus.ACTIVE, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == ServiceStatus.ACTIVE

    def deactivate(self) -> None:
        """Soft delete: existing bookings keep their captured duration and price"""
        if self.status == ServiceStatus.INACTIVE:
            raise ValueError("Service is already inactive")
        self.status = ServiceStatus.INACTIVE
        self.updated_at = datetime.utcnow()

"""
Tenant model - one business account, the unit of data isolation
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
import uuid


class Tenant(SQLModel, table=True):
    """Business (salon, clinic, ...) owning its own calendar"""

    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True, max_length=255)
    slug: str = Field(unique=True, index=True, max_length=255, description="Unique tenant identifier for subdomain routing")
    email: str = Field(index=True, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)

    # Plan
    plan: str = Field(default="basico", max_length=50, description="Plan tier code: basico, profesional, premium")

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
    is_active: bool = Field(default=True, index=True)

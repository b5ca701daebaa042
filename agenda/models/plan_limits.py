"""
Plan tier limits and feature flags
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

UNLIMITED = -1


class PlanTier(str, Enum):
    """Subscription tiers"""
    BASIC = "basico"
    PROFESSIONAL = "profesional"
    PREMIUM = "premium"

    @classmethod
    def from_code(cls, code: str) -> "PlanTier":
        for tier in cls:
            if tier.value == (code or "").strip().lower():
                return tier
        raise ValueError(f"Invalid plan tier: {code}")


class PlanLimits(SQLModel, table=True):
    """Resource caps of a plan tier, -1 meaning unlimited"""

    __tablename__ = "plan_limits"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    plan_tier: PlanTier = Field(unique=True, index=True)

    max_users: int
    max_clients: int
    max_appointments_month: int
    max_services: int

    sms_whatsapp_enabled: bool = Field(default=False)
    advanced_reports_enabled: bool = Field(default=False)
    priority_support: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None


DEFAULT_PLAN_LIMITS = {
    PlanTier.BASIC: dict(
        max_users=2,
        max_clients=50,
        max_appointments_month=100,
        max_services=10,
        sms_whatsapp_enabled=False,
        advanced_reports_enabled=False,
        priority_support=False,
    ),
    PlanTier.PROFESSIONAL: dict(
        max_users=5,
        max_clients=300,
        max_appointments_month=500,
        max_services=30,
        sms_whatsapp_enabled=False,
        advanced_reports_enabled=True,
        priority_support=False,
    ),
    PlanTier.PREMIUM: dict(
        max_users=UNLIMITED,
        max_clients=UNLIMITED,
        max_appointments_month=UNLIMITED,
        max_services=UNLIMITED,
        sms_whatsapp_enabled=False,
        advanced_reports_enabled=True,
        priority_support=True,
    ),
}

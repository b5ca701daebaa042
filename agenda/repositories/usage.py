"""
Plan limits and usage counter queries
"""

from typing import Optional
import uuid

from sqlmodel import Session, select

from agenda.models.plan_limits import PlanLimits, PlanTier
from agenda.models.usage_counter import UsageCounter


def get_plan_limits(session: Session, plan_tier: PlanTier) -> Optional[PlanLimits]:
    statement = select(PlanLimits).where(PlanLimits.plan_tier == plan_tier)
    return session.exec(statement).first()


def get_usage_counter(session: Session, tenant_id: uuid.UUID, period: str) -> Optional[UsageCounter]:
    statement = select(UsageCounter).where(
        UsageCounter.tenant_id == tenant_id,
        UsageCounter.period == period,
    )
    return session.exec(statement).first()

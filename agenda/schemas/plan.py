"""
API schemas for plan limits and usage
"""

from sqlmodel import SQLModel
from typing import Dict


class ResourceUsageRead(SQLModel):
    current: int
    limit: int
    unlimited: bool
    percentage: float
    alert: bool


class UsageSummaryRead(SQLModel):
    tenant_id: str
    plan_tier: str
    period: str
    resources: Dict[str, ResourceUsageRead]
    features: Dict[str, bool]


class FeatureCheckRead(SQLModel):
    feature: str
    enabled: bool

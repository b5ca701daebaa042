"""
Plan usage and feature flag API endpoints
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from agenda.core.database import get_session
from agenda.core.dependencies import RequestContext, require_permission
from agenda.core.permissions import Permission
from agenda.schemas.plan import FeatureCheckRead, UsageSummaryRead
from agenda.services.quotas import QuotaService

router = APIRouter()


@router.get("/usage", response_model=UsageSummaryRead)
async def get_usage(
    context: RequestContext = Depends(require_permission(Permission.DASHBOARD_VIEW)),
    session: Session = Depends(get_session)
):
    """Current period usage against the tenant's plan limits"""
    quotas = QuotaService(session)
    return quotas.usage_summary(context.tenant_id, quotas.plan_tier_for_tenant(context.tenant_id))


@router.get("/features/{feature}", response_model=FeatureCheckRead)
async def check_feature(
    feature: str,
    context: RequestContext = Depends(require_permission(Permission.DASHBOARD_VIEW)),
    session: Session = Depends(get_session)
):
    quotas = QuotaService(session)
    enabled = quotas.is_feature_enabled(quotas.plan_tier_for_tenant(context.tenant_id), feature)
    return FeatureCheckRead(feature=feature, enabled=enabled)

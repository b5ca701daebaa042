"""
Quota/usage gate

Limits are soft: the check, the creation and the usage refresh are separate
steps, so two concurrent creations may both pass a check one below the limit.
Counters are recomputed from the authoritative tables after every write
instead of being incremented.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional, Union
import uuid

from sqlmodel import Session
import structlog

from agenda.core.config import Settings, get_settings
from agenda.core.exceptions import (
    ConfigurationError, FeatureNotAvailableError, NotFoundError, QuotaExceededError
)
from agenda.models.plan_limits import DEFAULT_PLAN_LIMITS, UNLIMITED, PlanLimits, PlanTier
from agenda.models.usage_counter import UsageCounter, period_key
from agenda.repositories import appointments as appointment_repo
from agenda.repositories import catalog as catalog_repo
from agenda.repositories import usage as usage_repo

logger = structlog.get_logger(__name__)

# Resource kinds checked by the gate
USERS = "usuarios"
CLIENTS = "clientes"
APPOINTMENTS_MONTH = "citas_mes"
SERVICES = "servicios"

_LIMIT_FIELDS = {
    USERS: "max_users",
    CLIENTS: "max_clients",
    APPOINTMENTS_MONTH: "max_appointments_month",
    SERVICES: "max_services",
}

_FEATURE_FLAGS = {
    "sms_whatsapp": "sms_whatsapp_enabled",
    "sms": "sms_whatsapp_enabled",
    "whatsapp": "sms_whatsapp_enabled",
    "reportes_avanzados": "advanced_reports_enabled",
    "advanced_reports": "advanced_reports_enabled",
    "soporte_prioritario": "priority_support",
    "priority_support": "priority_support",
}

PlanTierLike = Union[PlanTier, str]


class QuotaService:
    def __init__(
        self,
        session: Session,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.clock = clock

    # Plan limits

    def seed_plan_limits(self) -> int:
        """Insert the default limits of every tier not yet configured"""
        created = 0
        for tier, values in DEFAULT_PLAN_LIMITS.items():
            if usage_repo.get_plan_limits(self.session, tier) is None:
                self.session.add(PlanLimits(plan_tier=tier, **values))
                created += 1
        if created:
            self.session.commit()
            logger.info(f"Seeded limits for {created} plan tiers")
        return created

    def get_plan_limits(self, plan_tier: PlanTierLike) -> PlanLimits:
        tier = self._resolve_tier(plan_tier)
        limits = usage_repo.get_plan_limits(self.session, tier)
        if limits is None:
            raise ConfigurationError(f"Plan tier '{tier.value}' is not configured")
        return limits

    def plan_tier_for_tenant(self, tenant_id: uuid.UUID) -> PlanTier:
        tenant = catalog_repo.get_tenant(self.session, tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")
        return self._resolve_tier(tenant.plan)

    # Limit checks

    def current_count(self, tenant_id: uuid.UUID, kind: str) -> int:
        """Authoritative count for a resource kind"""
        if kind == USERS:
            return catalog_repo.count_active_users(self.session, tenant_id)
        if kind == CLIENTS:
            return catalog_repo.count_clients(self.session, tenant_id)
        if kind == APPOINTMENTS_MONTH:
            today = self.clock().date()
            return appointment_repo.count_appointments(self.session, tenant_id, today.year, today.month)
        if kind == SERVICES:
            return catalog_repo.count_active_services(self.session, tenant_id)
        raise ConfigurationError(f"Unknown quota kind '{kind}'")

    def check_limit(self, tenant_id: uuid.UUID, plan_tier: PlanTierLike, kind: str) -> None:
        """Raise QuotaExceededError when the tenant already uses the whole quota"""
        if kind not in _LIMIT_FIELDS:
            raise ConfigurationError(f"Unknown quota kind '{kind}'")

        limits = self.get_plan_limits(plan_tier)
        limit = getattr(limits, _LIMIT_FIELDS[kind])
        if limit == UNLIMITED:
            return

        current = self.current_count(tenant_id, kind)
        if current >= limit:
            logger.warning(
                f"Quota exceeded for tenant {tenant_id}: {kind} {current}/{limit} "
                f"on plan {limits.plan_tier.value}"
            )
            raise QuotaExceededError(kind, current, limit)

    def check_user_limit(self, tenant_id: uuid.UUID, plan_tier: PlanTierLike) -> None:
        self.check_limit(tenant_id, plan_tier, USERS)

    def check_client_limit(self, tenant_id: uuid.UUID, plan_tier: PlanTierLike) -> None:
        self.check_limit(tenant_id, plan_tier, CLIENTS)

    def check_appointment_limit(self, tenant_id: uuid.UUID, plan_tier: PlanTierLike) -> None:
        self.check_limit(tenant_id, plan_tier, APPOINTMENTS_MONTH)

    def check_service_limit(self, tenant_id: uuid.UUID, plan_tier: PlanTierLike) -> None:
        self.check_limit(tenant_id, plan_tier, SERVICES)

    # Usage counters

    def get_current_usage(self, tenant_id: uuid.UUID) -> UsageCounter:
        """Counter row of the current period, created with zeros when missing"""
        period = period_key(self.clock().date())
        counter = usage_repo.get_usage_counter(self.session, tenant_id, period)
        if counter is None:
            counter = UsageCounter(tenant_id=tenant_id, period=period)
            self.session.add(counter)
            self.session.commit()
            self.session.refresh(counter)
            logger.info(f"Usage period {period} opened for tenant {tenant_id}")
        return counter

    def refresh_usage(self, tenant_id: uuid.UUID) -> UsageCounter:
        """Recompute the four counters of the current period and persist them"""
        counter = self.get_current_usage(tenant_id)
        counter.total_users = self.current_count(tenant_id, USERS)
        counter.total_clients = self.current_count(tenant_id, CLIENTS)
        counter.total_appointments_month = self.current_count(tenant_id, APPOINTMENTS_MONTH)
        counter.total_services = self.current_count(tenant_id, SERVICES)
        counter.updated_at = datetime.utcnow()

        self.session.add(counter)
        self.session.commit()
        self.session.refresh(counter)

        logger.debug(
            f"Usage refreshed for tenant {tenant_id} ({counter.period}): "
            f"users={counter.total_users} clients={counter.total_clients} "
            f"appointments={counter.total_appointments_month} services={counter.total_services}"
        )
        return counter

    def usage_summary(self, tenant_id: uuid.UUID, plan_tier: PlanTierLike) -> Dict[str, Any]:
        """Counters next to limits, with percentage used and an alert flag per kind"""
        limits = self.get_plan_limits(plan_tier)
        counter = self.refresh_usage(tenant_id)
        current_values = {
            USERS: counter.total_users,
            CLIENTS: counter.total_clients,
            APPOINTMENTS_MONTH: counter.total_appointments_month,
            SERVICES: counter.total_services,
        }

        resources = {}
        for kind, field in _LIMIT_FIELDS.items():
            limit = getattr(limits, field)
            current = current_values[kind]
            if limit == UNLIMITED or limit <= 0:
                percentage = 0.0
            else:
                percentage = round(current * 100.0 / limit, 1)
            resources[kind] = {
                "current": current,
                "limit": limit,
                "unlimited": limit == UNLIMITED,
                "percentage": percentage,
                "alert": percentage >= self.settings.USAGE_ALERT_PERCENT,
            }

        return {
            "tenant_id": str(tenant_id),
            "plan_tier": limits.plan_tier.value,
            "period": counter.period,
            "resources": resources,
            "features": {
                "sms_whatsapp": limits.sms_whatsapp_enabled,
                "reportes_avanzados": limits.advanced_reports_enabled,
                "soporte_prioritario": limits.priority_support,
            },
        }

    # Feature flags

    def is_feature_enabled(self, plan_tier: PlanTierLike, feature: str) -> bool:
        flag = _FEATURE_FLAGS.get((feature or "").strip().lower())
        if flag is None:
            raise ConfigurationError(f"Unknown feature '{feature}'")
        return bool(getattr(self.get_plan_limits(plan_tier), flag))

    def require_feature(self, plan_tier: PlanTierLike, feature: str) -> None:
        if not self.is_feature_enabled(plan_tier, feature):
            tier = self._resolve_tier(plan_tier)
            logger.info(f"Feature {feature} not available on plan {tier.value}")
            raise FeatureNotAvailableError(feature, tier.value)

    @staticmethod
    def _resolve_tier(plan_tier: PlanTierLike) -> PlanTier:
        if isinstance(plan_tier, PlanTier):
            return plan_tier
        try:
            return PlanTier.from_code(plan_tier)
        except ValueError:
            raise ConfigurationError(f"Plan tier '{plan_tier}' is not configured")

"""
Clients, services and staff, guarded by the quota gate
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Sequence
import uuid

from sqlmodel import Session
import structlog

from agenda.core.config import Settings, get_settings
from agenda.core.exceptions import BadRequestError, NotFoundError
from agenda.models.client import Client
from agenda.models.service import Service
from agenda.models.user import User, UserRole
from agenda.repositories import catalog as catalog_repo
from agenda.services.quotas import QuotaService

logger = structlog.get_logger(__name__)


class CatalogService:
    def __init__(
        self,
        session: Session,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.clock = clock
        self.quotas = QuotaService(session, self.settings, clock)

    # Lookups

    def get_client(self, tenant_id: uuid.UUID, client_id: uuid.UUID) -> Client:
        client = catalog_repo.get_client(self.session, tenant_id, client_id)
        if client is None:
            raise NotFoundError("Client not found")
        return client

    def get_service(self, tenant_id: uuid.UUID, service_id: uuid.UUID) -> Service:
        service = catalog_repo.get_service(self.session, tenant_id, service_id)
        if service is None:
            raise NotFoundError(f"Service {service_id} not found")
        return service

    def get_bookable_services(self, tenant_id: uuid.UUID, service_ids: Sequence[uuid.UUID]) -> List[Service]:
        """Services of the tenant in the requested order, all of them active"""
        if not service_ids:
            raise BadRequestError("At least one service is required")

        services = []
        for service_id in service_ids:
            service = self.get_service(tenant_id, service_id)
            if not service.is_active:
                raise BadRequestError(f"Service '{service.name}' is not active")
            services.append(service)
        return services

    # Clients

    def create_client(
        self,
        tenant_id: uuid.UUID,
        first_name: str,
        last_name: str = "",
        email: Optional[str] = None,
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Client:
        self.quotas.check_client_limit(tenant_id, self.quotas.plan_tier_for_tenant(tenant_id))

        client = Client(
            tenant_id=tenant_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            notes=notes,
        )
        self.session.add(client)
        self.session.commit()
        self.session.refresh(client)

        self.quotas.refresh_usage(tenant_id)
        logger.info(f"Client created: {client.id} (tenant {tenant_id})")
        return client

    # Services

    def create_service(
        self,
        tenant_id: uuid.UUID,
        name: str,
        duration_minutes: int,
        price: Decimal = Decimal("0.00"),
        description: Optional[str] = None,
    ) -> Service:
        if duration_minutes <= 0:
            raise BadRequestError("Service duration must be positive")
        if price < 0:
            raise BadRequestError("Service price cannot be negative")

        self.quotas.check_service_limit(tenant_id, self.quotas.plan_tier_for_tenant(tenant_id))

        service = Service(
            tenant_id=tenant_id,
            name=name,
            description=description,
            duration_minutes=duration_minutes,
            price=price,
        )
        self.session.add(service)
        self.session.commit()
        self.session.refresh(service)

        self.quotas.refresh_usage(tenant_id)
        logger.info(f"Service created: {service.id} ({name}, {duration_minutes} min)")
        return service

    def deactivate_service(self, tenant_id: uuid.UUID, service_id: uuid.UUID) -> Service:
        service = self.get_service(tenant_id, service_id)
        try:
            service.deactivate()
        except ValueError as e:
            raise BadRequestError(str(e))

        self.session.add(service)
        self.session.commit()
        self.session.refresh(service)

        self.quotas.refresh_usage(tenant_id)
        logger.info(f"Service deactivated: {service_id}")
        return service

    # Staff

    def create_user(
        self,
        tenant_id: uuid.UUID,
        email: str,
        first_name: str,
        last_name: str = "",
        role: UserRole = UserRole.EMPLOYEE,
    ) -> User:
        self.quotas.check_user_limit(tenant_id, self.quotas.plan_tier_for_tenant(tenant_id))

        user = User(
            tenant_id=tenant_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)

        self.quotas.refresh_usage(tenant_id)
        logger.info(f"User created: {user.id} ({role.value})")
        return user

    def deactivate_user(self, tenant_id: uuid.UUID, user_id: uuid.UUID) -> User:
        user = catalog_repo.get_user(self.session, tenant_id, user_id)
        if user is None:
            raise NotFoundError("User not found")
        try:
            user.deactivate()
        except ValueError as e:
            raise BadRequestError(str(e))

        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)

        self.quotas.refresh_usage(tenant_id)
        logger.info(f"User deactivated: {user_id}")
        return user

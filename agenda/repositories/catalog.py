"""
Tenant, client, service and staff queries
"""

from typing import List, Optional
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from agenda.models.tenant import Tenant
from agenda.models.client import Client
from agenda.models.service import Service, ServiceStatus
from agenda.models.user import User, UserStatus


def get_tenant(session: Session, tenant_id: uuid.UUID) -> Optional[Tenant]:
    return session.get(Tenant, tenant_id)


def get_client(session: Session, tenant_id: uuid.UUID, client_id: uuid.UUID) -> Optional[Client]:
    statement = select(Client).where(Client.tenant_id == tenant_id, Client.id == client_id)
    return session.exec(statement).first()


def list_clients(session: Session, tenant_id: uuid.UUID, skip: int = 0, limit: int = 100) -> List[Client]:
    statement = (
        select(Client)
        .where(Client.tenant_id == tenant_id)
        .order_by(Client.last_name, Client.first_name)
        .offset(skip)
        .limit(limit)
    )
    return list(session.exec(statement).all())


def get_service(session: Session, tenant_id: uuid.UUID, service_id: uuid.UUID) -> Optional[Service]:
    statement = select(Service).where(Service.tenant_id == tenant_id, Service.id == service_id)
    return session.exec(statement).first()


def list_services(session: Session, tenant_id: uuid.UUID, active_only: bool = False) -> List[Service]:
    statement = select(Service).where(Service.tenant_id == tenant_id)
    if active_only:
        statement = statement.where(Service.status == ServiceStatus.ACTIVE)
    return list(session.exec(statement.order_by(Service.name)).all())


def get_user(session: Session, tenant_id: uuid.UUID, user_id: uuid.UUID) -> Optional[User]:
    statement = select(User).where(User.tenant_id == tenant_id, User.id == user_id)
    return session.exec(statement).first()


def count_active_users(session: Session, tenant_id: uuid.UUID) -> int:
    statement = select(func.count()).select_from(User).where(
        User.tenant_id == tenant_id,
        User.status == UserStatus.ACTIVE,
    )
    return session.exec(statement).one()


def count_clients(session: Session, tenant_id: uuid.UUID) -> int:
    statement = select(func.count()).select_from(Client).where(Client.tenant_id == tenant_id)
    return session.exec(statement).one()


def count_active_services(session: Session, tenant_id: uuid.UUID) -> int:
    statement = select(func.count()).select_from(Service).where(
        Service.tenant_id == tenant_id,
        Service.status == ServiceStatus.ACTIVE,
    )
    return session.exec(statement).one()

"""
Clients, services and staff API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List
import structlog
import uuid

from agenda.core.database import get_session
from agenda.core.dependencies import RequestContext, require_permission
from agenda.core.permissions import Permission
from agenda.models.client import Client
from agenda.models.service import Service
from agenda.models.user import User
from agenda.repositories import catalog as catalog_repo
from agenda.schemas.catalog import ClientCreate, ServiceCreate, UserCreate
from agenda.services.catalog import CatalogService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/clients", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    context: RequestContext = Depends(require_permission(Permission.CLIENT_CREATE)),
    session: Session = Depends(get_session)
):
    return CatalogService(session).create_client(context.tenant_id, **data.model_dump())


@router.get("/clients", response_model=List[Client])
async def list_clients(
    skip: int = 0,
    limit: int = 100,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_VIEW)),
    session: Session = Depends(get_session)
):
    return catalog_repo.list_clients(session, context.tenant_id, skip, limit)


@router.post("/services", response_model=Service, status_code=status.HTTP_201_CREATED)
async def create_service(
    data: ServiceCreate,
    context: RequestContext = Depends(require_permission(Permission.SERVICE_CREATE)),
    session: Session = Depends(get_session)
):
    return CatalogService(session).create_service(context.tenant_id, **data.model_dump())


@router.get("/services", response_model=List[Service])
async def list_services(
    active_only: bool = True,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_VIEW)),
    session: Session = Depends(get_session)
):
    return catalog_repo.list_services(session, context.tenant_id, active_only)


@router.post("/services/{service_id}/deactivate", response_model=Service)
async def deactivate_service(
    service_id: uuid.UUID,
    context: RequestContext = Depends(require_permission(Permission.SERVICE_DELETE)),
    session: Session = Depends(get_session)
):
    return CatalogService(session).deactivate_service(context.tenant_id, service_id)


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    context: RequestContext = Depends(require_permission(Permission.USER_INVITE)),
    session: Session = Depends(get_session)
):
    """Add a staff member (identity is provisioned by the auth collaborator)"""
    user = CatalogService(session).create_user(context.tenant_id, **data.model_dump())
    logger.info(f"User {user.id} invited by {context.user_id}")
    return user


@router.post("/users/{user_id}/deactivate", response_model=User)
async def deactivate_user(
    user_id: uuid.UUID,
    context: RequestContext = Depends(require_permission(Permission.USER_DEACTIVATE)),
    session: Session = Depends(get_session)
):
    return CatalogService(session).deactivate_user(context.tenant_id, user_id)

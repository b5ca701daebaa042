"""
Appointments API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from datetime import date
from typing import List, Optional
import structlog
import uuid

from agenda.core.database import get_session
from agenda.core.dependencies import RequestContext, require_permission
from agenda.core.events import event_bus
from agenda.core.exceptions import BadRequestError
from agenda.core.permissions import Permission
from agenda.schemas.appointment import (
    AppointmentCreate, AppointmentRead, AppointmentStateUpdate, AppointmentUpdate
)
from agenda.services.appointments import AppointmentService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/", response_model=AppointmentRead, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    data: AppointmentCreate,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_CREATE)),
    session: Session = Depends(get_session)
):
    """Book an appointment, optionally recurring"""
    recurrence = None
    if data.recurrence is not None:
        try:
            recurrence = data.recurrence.to_rule()
        except ValueError as e:
            raise BadRequestError(str(e))

    service = AppointmentService(session)
    appointment = service.create_appointment(
        tenant_id=context.tenant_id,
        client_id=data.client_id,
        service_ids=data.service_ids,
        start=data.start_at,
        notes=data.notes,
        price=data.price,
        recurrence=recurrence,
        created_by=context.user_id,
    )

    await event_bus.publish_all(service.events)
    return appointment


@router.get("/", response_model=List[AppointmentRead])
async def list_appointments(
    day: Optional[date] = None,
    state: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_VIEW)),
    session: Session = Depends(get_session)
):
    """List appointments of the tenant, optionally for one day or state"""
    return AppointmentService(session).list_appointments(context.tenant_id, day, state, skip, limit)


@router.get("/{appointment_id}", response_model=AppointmentRead)
async def get_appointment(
    appointment_id: uuid.UUID,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_VIEW)),
    session: Session = Depends(get_session)
):
    return AppointmentService(session).get_appointment(context.tenant_id, appointment_id)


@router.patch("/{appointment_id}", response_model=AppointmentRead)
async def update_appointment(
    appointment_id: uuid.UUID,
    data: AppointmentUpdate,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_MODIFY)),
    session: Session = Depends(get_session)
):
    """Move or edit an appointment"""
    service = AppointmentService(session)
    appointment = service.update_appointment(
        context.tenant_id, appointment_id, data.model_dump(exclude_unset=True)
    )

    await event_bus.publish_all(service.events)
    return appointment


@router.post("/{appointment_id}/state", response_model=AppointmentRead)
async def change_appointment_state(
    appointment_id: uuid.UUID,
    data: AppointmentStateUpdate,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_MODIFY)),
    session: Session = Depends(get_session)
):
    """Confirm, complete or cancel an appointment"""
    service = AppointmentService(session)
    appointment = service.change_state(context.tenant_id, appointment_id, data.state)

    await event_bus.publish_all(service.events)
    return appointment


@router.post("/{appointment_id}/cancel", response_model=AppointmentRead)
async def cancel_appointment(
    appointment_id: uuid.UUID,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_CANCEL)),
    session: Session = Depends(get_session)
):
    service = AppointmentService(session)
    appointment = service.cancel_appointment(context.tenant_id, appointment_id)

    await event_bus.publish_all(service.events)
    logger.info(f"Appointment canceled by {context.user_id}: {appointment_id}")
    return appointment

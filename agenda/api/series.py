"""
Recurring series API endpoints
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import List
import structlog
import uuid

from agenda.core.database import get_session
from agenda.core.dependencies import RequestContext, require_permission
from agenda.core.events import event_bus
from agenda.core.permissions import Permission
from agenda.schemas.appointment import AppointmentRead, SeriesCountRead, SeriesUpdate
from agenda.services.recurrence import RecurrenceService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/{parent_id}", response_model=List[AppointmentRead])
async def get_series(
    parent_id: uuid.UUID,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_VIEW)),
    session: Session = Depends(get_session)
):
    """Parent and children of a series, ordered by start"""
    return RecurrenceService(session).get_series(context.tenant_id, parent_id)


@router.post("/{parent_id}/cancel", response_model=SeriesCountRead)
async def cancel_series(
    parent_id: uuid.UUID,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_CANCEL)),
    session: Session = Depends(get_session)
):
    """Cancel the future children of a series"""
    service = RecurrenceService(session)
    canceled = service.cancel_series(context.tenant_id, parent_id)

    await event_bus.publish_all(service.events)
    return SeriesCountRead(parent_id=parent_id, affected=canceled)


@router.patch("/{parent_id}", response_model=SeriesCountRead)
async def update_series(
    parent_id: uuid.UUID,
    data: SeriesUpdate,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_MODIFY)),
    session: Session = Depends(get_session)
):
    """Apply notes, price or state to the future children of a series"""
    service = RecurrenceService(session)
    updated = service.update_series(context.tenant_id, parent_id, data.model_dump(exclude_unset=True))

    await event_bus.publish_all(service.events)
    return SeriesCountRead(parent_id=parent_id, affected=updated)

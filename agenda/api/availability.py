"""
Availability API endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from datetime import date
from typing import List, Optional
import uuid

from agenda.core.database import get_session
from agenda.core.dependencies import RequestContext, require_permission
from agenda.core.permissions import Permission
from agenda.schemas.appointment import AvailabilityRead, SlotRead
from agenda.services.availability import AvailabilityService

router = APIRouter()


@router.get("/", response_model=AvailabilityRead)
async def list_available_slots(
    day: date,
    service_ids: List[uuid.UUID] = Query(...),
    exclude_appointment_id: Optional[uuid.UUID] = None,
    interval_minutes: Optional[int] = Query(default=None, gt=0),
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_VIEW)),
    session: Session = Depends(get_session)
):
    """Free start times of a day for the combined duration of the services"""
    slots = AvailabilityService(session).list_available_slots(
        context.tenant_id,
        day,
        service_ids,
        exclude_appointment_id=exclude_appointment_id,
        interval_minutes=interval_minutes,
    )
    return AvailabilityRead(
        day=day,
        slots=[SlotRead(**slot._asdict()) for slot in slots],
    )

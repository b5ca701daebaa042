"""
Working hours and days off API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from datetime import date
from typing import List, Optional
import uuid

from agenda.core.database import get_session
from agenda.core.dependencies import RequestContext, require_permission
from agenda.core.permissions import Permission
from agenda.models.day_off import DayOff
from agenda.models.working_hours import WorkingHours
from agenda.schemas.calendar import DayOffCreate, WorkingHoursSet, WorkingHoursUpdate
from agenda.services.calendar import CalendarService

router = APIRouter()


@router.get("/working-hours", response_model=List[WorkingHours])
async def list_working_hours(
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_VIEW)),
    session: Session = Depends(get_session)
):
    return CalendarService(session).list_working_hours(context.tenant_id)


@router.put("/working-hours", response_model=WorkingHours)
async def set_working_hours(
    data: WorkingHoursSet,
    context: RequestContext = Depends(require_permission(Permission.SCHEDULE_MANAGE)),
    session: Session = Depends(get_session)
):
    """Create or replace the working hours of a weekday"""
    return CalendarService(session).set_working_hours(
        context.tenant_id, data.weekday, data.opens_at, data.closes_at, data.is_active
    )


@router.patch("/working-hours/{entry_id}", response_model=WorkingHours)
async def update_working_hours(
    entry_id: uuid.UUID,
    data: WorkingHoursUpdate,
    context: RequestContext = Depends(require_permission(Permission.SCHEDULE_MANAGE)),
    session: Session = Depends(get_session)
):
    return CalendarService(session).update_working_hours(
        context.tenant_id, entry_id, **data.model_dump(exclude_unset=True)
    )


@router.delete("/working-hours/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_working_hours(
    entry_id: uuid.UUID,
    context: RequestContext = Depends(require_permission(Permission.SCHEDULE_MANAGE)),
    session: Session = Depends(get_session)
):
    CalendarService(session).delete_working_hours(context.tenant_id, entry_id)


@router.get("/days-off", response_model=List[DayOff])
async def list_days_off(
    start: Optional[date] = None,
    end: Optional[date] = None,
    context: RequestContext = Depends(require_permission(Permission.APPOINTMENT_VIEW)),
    session: Session = Depends(get_session)
):
    return CalendarService(session).list_days_off(context.tenant_id, start, end)


@router.post("/days-off", response_model=DayOff, status_code=status.HTTP_201_CREATED)
async def add_day_off(
    data: DayOffCreate,
    context: RequestContext = Depends(require_permission(Permission.SCHEDULE_MANAGE)),
    session: Session = Depends(get_session)
):
    """Close the business for a whole day"""
    return CalendarService(session).add_day_off(context.tenant_id, data.day, data.reason)


@router.delete("/days-off/{day_off_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_day_off(
    day_off_id: uuid.UUID,
    context: RequestContext = Depends(require_permission(Permission.SCHEDULE_MANAGE)),
    session: Session = Depends(get_session)
):
    CalendarService(session).remove_day_off(context.tenant_id, day_off_id)

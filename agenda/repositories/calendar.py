"""
Calendar configuration queries (working hours and days off)
"""

from datetime import date
from typing import List, Optional
import uuid

from sqlmodel import Session, select

from agenda.models.working_hours import WorkingHours
from agenda.models.day_off import DayOff


def get_working_hours(session: Session, tenant_id: uuid.UUID, weekday: int) -> Optional[WorkingHours]:
    """Entry governing a weekday, active or not"""
    statement = select(WorkingHours).where(
        WorkingHours.tenant_id == tenant_id,
        WorkingHours.weekday == weekday,
    )
    return session.exec(statement).first()


def get_working_hours_by_id(session: Session, tenant_id: uuid.UUID, entry_id: uuid.UUID) -> Optional[WorkingHours]:
    statement = select(WorkingHours).where(
        WorkingHours.tenant_id == tenant_id,
        WorkingHours.id == entry_id,
    )
    return session.exec(statement).first()


def list_working_hours(session: Session, tenant_id: uuid.UUID) -> List[WorkingHours]:
    statement = (
        select(WorkingHours)
        .where(WorkingHours.tenant_id == tenant_id)
        .order_by(WorkingHours.weekday)
    )
    return list(session.exec(statement).all())


def get_day_off(session: Session, tenant_id: uuid.UUID, day: date) -> Optional[DayOff]:
    statement = select(DayOff).where(DayOff.tenant_id == tenant_id, DayOff.day == day)
    return session.exec(statement).first()


def get_day_off_by_id(session: Session, tenant_id: uuid.UUID, day_off_id: uuid.UUID) -> Optional[DayOff]:
    statement = select(DayOff).where(DayOff.tenant_id == tenant_id, DayOff.id == day_off_id)
    return session.exec(statement).first()


def list_days_off(
    session: Session,
    tenant_id: uuid.UUID,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[DayOff]:
    """Days off in [start, end], both bounds optional"""
    statement = select(DayOff).where(DayOff.tenant_id == tenant_id)
    if start is not None:
        statement = statement.where(DayOff.day >= start)
    if end is not None:
        statement = statement.where(DayOff.day <= end)
    return list(session.exec(statement.order_by(DayOff.day)).all())

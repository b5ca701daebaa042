"""
Appointment ledger queries
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional
import uuid

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlmodel import Session, select

from agenda.models.appointment import Appointment, AppointmentState


def _day_bounds(day: date):
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def get_appointment(session: Session, tenant_id: uuid.UUID, appointment_id: uuid.UUID) -> Optional[Appointment]:
    statement = select(Appointment).where(
        Appointment.tenant_id == tenant_id,
        Appointment.id == appointment_id,
    )
    return session.exec(statement).first()


def list_appointments_for_date(
    session: Session,
    tenant_id: uuid.UUID,
    day: date,
    include_canceled: bool = False,
) -> List[Appointment]:
    """Appointments whose start falls on ``day``, ordered by start"""
    day_start, day_end = _day_bounds(day)
    statement = select(Appointment).where(
        Appointment.tenant_id == tenant_id,
        Appointment.start_at >= day_start,
        Appointment.start_at < day_end,
    )
    if not include_canceled:
        statement = statement.where(Appointment.state != AppointmentState.CANCELED)
    return list(session.exec(statement.order_by(Appointment.start_at)).all())


def list_appointments(
    session: Session,
    tenant_id: uuid.UUID,
    day: Optional[date] = None,
    state: Optional[AppointmentState] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Appointment]:
    statement = select(Appointment).where(Appointment.tenant_id == tenant_id)
    if day is not None:
        day_start, day_end = _day_bounds(day)
        statement = statement.where(Appointment.start_at >= day_start, Appointment.start_at < day_end)
    if state is not None:
        statement = statement.where(Appointment.state == state)
    statement = statement.order_by(Appointment.start_at).offset(skip).limit(limit)
    return list(session.exec(statement).all())


def list_series_children(
    session: Session,
    tenant_id: uuid.UUID,
    parent_id: uuid.UUID,
    starting_after: Optional[datetime] = None,
) -> List[Appointment]:
    """Children of a series, optionally only those starting strictly after a moment"""
    statement = select(Appointment).where(
        Appointment.tenant_id == tenant_id,
        Appointment.parent_appointment_id == parent_id,
    )
    if starting_after is not None:
        statement = statement.where(Appointment.start_at > starting_after)
    return list(session.exec(statement.order_by(Appointment.start_at)).all())


def count_appointments(session: Session, tenant_id: uuid.UUID, year: int, month: int) -> int:
    """Appointments whose start falls in the given month, any state"""
    month_start = datetime(year, month, 1)
    month_end = month_start + relativedelta(months=1)
    statement = select(func.count()).select_from(Appointment).where(
        Appointment.tenant_id == tenant_id,
        Appointment.start_at >= month_start,
        Appointment.start_at < month_end,
    )
    return session.exec(statement).one()

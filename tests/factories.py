"""
Row builders for tests (bypass the quota gate on purpose)
"""

from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Optional
import uuid

from sqlmodel import Session

from agenda.models import (
    Appointment, AppointmentServiceLine, AppointmentState, Client, DayOff,
    Service, Tenant, User, UserRole, WorkingHours,
)


def make_tenant(db: Session, name: str = "Studio Bella", slug: Optional[str] = None, plan: str = "basico") -> Tenant:
    tenant = Tenant(
        name=name,
        slug=slug or f"tenant-{uuid.uuid4().hex[:8]}",
        email=f"{uuid.uuid4().hex[:6]}@example.com",
        plan=plan,
    )
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


def make_client(db: Session, tenant_id: uuid.UUID, first_name: str = "Lucia", last_name: str = "Gomez") -> Client:
    client = Client(tenant_id=tenant_id, first_name=first_name, last_name=last_name)
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


def make_service(
    db: Session,
    tenant_id: uuid.UUID,
    name: str = "Haircut",
    duration_minutes: int = 30,
    price: Decimal = Decimal("20.00"),
) -> Service:
    service = Service(tenant_id=tenant_id, name=name, duration_minutes=duration_minutes, price=price)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def make_user(db: Session, tenant_id: uuid.UUID, role: UserRole = UserRole.EMPLOYEE) -> User:
    user = User(
        tenant_id=tenant_id,
        email=f"{uuid.uuid4().hex[:6]}@example.com",
        first_name="Staff",
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_working_hours(
    db: Session,
    tenant_id: uuid.UUID,
    weekday: int,
    opens_at: time = time(9, 0),
    closes_at: time = time(17, 0),
    is_active: bool = True,
) -> WorkingHours:
    entry = WorkingHours(
        tenant_id=tenant_id,
        weekday=weekday,
        opens_at=opens_at,
        closes_at=closes_at,
        is_active=is_active,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def make_day_off(db: Session, tenant_id: uuid.UUID, day, reason: str = "Holiday") -> DayOff:
    day_off = DayOff(tenant_id=tenant_id, day=day, reason=reason)
    db.add(day_off)
    db.commit()
    db.refresh(day_off)
    return day_off


def make_appointment(
    db: Session,
    tenant_id: uuid.UUID,
    client_id: uuid.UUID,
    start: datetime,
    minutes: int = 60,
    state: AppointmentState = AppointmentState.PENDING,
    service: Optional[Service] = None,
    parent_id: Optional[uuid.UUID] = None,
) -> Appointment:
    appointment = Appointment(
        tenant_id=tenant_id,
        client_id=client_id,
        start_at=start,
        end_at=start + timedelta(minutes=minutes),
        state=state,
        price=Decimal("0.00"),
        parent_appointment_id=parent_id,
    )
    if service is not None:
        appointment.service_lines = [
            AppointmentServiceLine(
                service_id=service.id,
                name=service.name,
                duration_minutes=service.duration_minutes,
                price=service.price,
                position=0,
            )
        ]
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment

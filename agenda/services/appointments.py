"""
Appointment service: the booking operations exposed to the API

create: quota gate -> client and services -> tenant-day lock -> conflict
check -> persist parent and series -> usage refresh. Events produced along
the way are collected in ``events`` for the caller to publish after commit.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
import structlog

from agenda.core.config import Settings, get_settings
from agenda.core.events import (
    AppointmentCreated, AppointmentStateChanged, AppointmentUpdated, DomainEvent
)
from agenda.core.exceptions import BadRequestError, ConflictError, NotFoundError
from agenda.core.locks import tenant_day_lock, tenant_days_lock
from agenda.models.appointment import Appointment, AppointmentState
from agenda.models.appointment_service_line import AppointmentServiceLine
from agenda.models.service import Service
from agenda.repositories import appointments as appointment_repo
from agenda.scheduling.recurrence import RecurrenceRule, end_of_day
from agenda.scheduling.times import as_naive_utc
from agenda.services.catalog import CatalogService
from agenda.services.conflicts import ConflictService
from agenda.services.quotas import QuotaService
from agenda.services.recurrence import RecurrenceService

logger = structlog.get_logger(__name__)

UPDATE_FIELDS = ("client_id", "service_ids", "start_at", "notes", "price")


def build_service_lines(services: Sequence[Service]) -> List[AppointmentServiceLine]:
    """Snapshot the catalog entries being booked, in booking order"""
    return [
        AppointmentServiceLine(
            service_id=service.id,
            name=service.name,
            duration_minutes=service.duration_minutes,
            price=service.price,
            position=position,
        )
        for position, service in enumerate(services)
    ]


def _parse_state(value: Union[str, AppointmentState]) -> AppointmentState:
    try:
        return AppointmentState.parse(value)
    except ValueError:
        raise BadRequestError(f"Invalid appointment state '{value}'")


class AppointmentService:
    def __init__(
        self,
        session: Session,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.clock = clock
        self.events: List[DomainEvent] = []
        self.catalog = CatalogService(session, self.settings, clock)
        self.quotas = QuotaService(session, self.settings, clock)
        self.conflicts = ConflictService(session)
        self.recurrence = RecurrenceService(session, self.settings, clock, events=self.events)

    def get_appointment(self, tenant_id: uuid.UUID, appointment_id: uuid.UUID) -> Appointment:
        appointment = appointment_repo.get_appointment(self.session, tenant_id, appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment not found")
        return appointment

    def list_appointments(
        self,
        tenant_id: uuid.UUID,
        day: Optional[date] = None,
        state: Optional[Union[str, AppointmentState]] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Appointment]:
        parsed_state = _parse_state(state) if state else None
        return appointment_repo.list_appointments(self.session, tenant_id, day, parsed_state, skip, limit)

    def create_appointment(
        self,
        tenant_id: uuid.UUID,
        client_id: uuid.UUID,
        service_ids: Sequence[uuid.UUID],
        start: datetime,
        notes: Optional[str] = None,
        price: Optional[Decimal] = None,
        recurrence: Optional[RecurrenceRule] = None,
        created_by: Optional[uuid.UUID] = None,
    ) -> Appointment:
        """Book an appointment and, when a rule is given, its series"""
        start = as_naive_utc(start)
        plan_tier = self.quotas.plan_tier_for_tenant(tenant_id)
        self.quotas.check_appointment_limit(tenant_id, plan_tier)

        self.catalog.get_client(tenant_id, client_id)
        services = self.catalog.get_bookable_services(tenant_id, service_ids)
        if price is not None and price < 0:
            raise BadRequestError("Price cannot be negative")

        duration = sum(service.duration_minutes for service in services)
        end = start + timedelta(minutes=duration)

        tenant_day_lock(self.session, tenant_id, start.date())
        self.conflicts.ensure_no_conflict(tenant_id, start, end)

        appointment = Appointment(
            tenant_id=tenant_id,
            client_id=client_id,
            created_by=created_by,
            start_at=start,
            end_at=end,
            state=AppointmentState.PENDING,
            notes=notes,
            price=price if price is not None else sum((s.price for s in services), Decimal("0.00")),
        )
        appointment.service_lines = build_service_lines(services)
        if recurrence is not None:
            appointment.is_recurring = True
            appointment.recurrence_pattern = recurrence.pattern
            appointment.recurrence_weekdays = list(recurrence.weekdays) or None
            appointment.recurrence_interval_days = recurrence.interval_days
            appointment.recurrence_max_occurrences = recurrence.max_occurrences
            appointment.recurrence_end_at = end_of_day(recurrence.end_at) if recurrence.end_at else None

        self.session.add(appointment)
        created_index = len(self.events)
        children = []
        try:
            self.session.flush()
            if recurrence is not None:
                children = self.recurrence.generate_series(appointment, commit=False)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.warning(f"Booking rejected by the ledger for tenant {tenant_id} at {start}")
            raise ConflictError(
                f"{start:%H:%M}-{end:%H:%M} conflicts with an existing appointment"
            )
        self.session.refresh(appointment)

        self.quotas.refresh_usage(tenant_id)

        self.events.insert(created_index, AppointmentCreated(
            appointment_id=appointment.id,
            tenant_id=tenant_id,
            client_id=client_id,
            start_at=appointment.start_at,
            end_at=appointment.end_at,
            is_recurring=appointment.is_recurring,
        ))
        logger.info(
            f"Appointment created: {appointment.id} ({start:%Y-%m-%d %H:%M}-{end:%H:%M}, "
            f"{len(services)} services, {len(children)} series children)"
        )
        return appointment

    def update_appointment(
        self,
        tenant_id: uuid.UUID,
        appointment_id: uuid.UUID,
        patch: Mapping[str, Any],
    ) -> Appointment:
        """Change client, services, start, notes or price of a live appointment"""
        unknown = set(patch) - set(UPDATE_FIELDS)
        if unknown:
            raise BadRequestError(f"Unsupported appointment fields: {', '.join(sorted(unknown))}")

        new_price = None
        if patch.get("price") is not None:
            new_price = Decimal(str(patch["price"]))
            if new_price < 0:
                raise BadRequestError("Price cannot be negative")

        appointment = self.get_appointment(tenant_id, appointment_id)
        if appointment.is_terminal():
            raise BadRequestError(f"Cannot modify a {appointment.state.value} appointment")

        # Everything is validated before the appointment is touched
        new_client_id = patch.get("client_id")
        if new_client_id == appointment.client_id:
            new_client_id = None
        if new_client_id:
            self.catalog.get_client(tenant_id, new_client_id)

        services = None
        if patch.get("service_ids"):
            services = self.catalog.get_bookable_services(tenant_id, patch["service_ids"])
            duration = timedelta(minutes=sum(service.duration_minutes for service in services))
        else:
            duration = appointment.end_at - appointment.start_at

        new_start = as_naive_utc(patch.get("start_at")) or appointment.start_at
        new_end = new_start + duration
        moved = new_start != appointment.start_at or new_end != appointment.end_at
        if moved:
            tenant_days_lock(self.session, tenant_id, [appointment.start_at.date(), new_start.date()])
            self.conflicts.ensure_no_conflict(tenant_id, new_start, new_end, exclude_appointment_id=appointment.id)

        changed = []

        if new_client_id:
            appointment.client_id = new_client_id
            changed.append("client_id")

        if moved:
            if new_start != appointment.start_at:
                changed.append("start_at")
            appointment.start_at = new_start
            appointment.end_at = new_end

        if services is not None:
            appointment.service_lines = build_service_lines(services)
            changed.append("service_ids")
            if new_price is None:
                appointment.price = sum((s.price for s in services), Decimal("0.00"))
                changed.append("price")

        if "notes" in patch:
            appointment.notes = patch["notes"]
            changed.append("notes")

        if new_price is not None:
            appointment.price = new_price
            changed.append("price")

        appointment.updated_at = datetime.utcnow()
        self.session.add(appointment)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError(
                f"{new_start:%H:%M}-{new_end:%H:%M} conflicts with an existing appointment"
            )
        self.session.refresh(appointment)

        self.events.append(AppointmentUpdated(
            appointment_id=appointment.id,
            tenant_id=tenant_id,
            changed_fields=changed,
        ))
        logger.info(f"Appointment updated: {appointment.id} ({', '.join(changed) or 'no changes'})")
        return appointment

    def change_state(
        self,
        tenant_id: uuid.UUID,
        appointment_id: uuid.UUID,
        new_state: Union[str, AppointmentState],
    ) -> Appointment:
        target = _parse_state(new_state)
        appointment = self.get_appointment(tenant_id, appointment_id)
        previous = appointment.state

        try:
            appointment.transition_to(target)
        except ValueError as e:
            raise BadRequestError(str(e))

        self.session.add(appointment)
        self.session.commit()
        self.session.refresh(appointment)

        self.events.append(AppointmentStateChanged(
            appointment_id=appointment.id,
            tenant_id=tenant_id,
            state=target.value,
            previous_state=previous.value,
        ))
        logger.info(f"Appointment {appointment.id} state: {previous.value} -> {target.value}")
        return appointment

    def cancel_appointment(self, tenant_id: uuid.UUID, appointment_id: uuid.UUID) -> Appointment:
        return self.change_state(tenant_id, appointment_id, AppointmentState.CANCELED)

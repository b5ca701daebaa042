"""
Availability calculator: bookable start times for a day and a set of services
"""

from datetime import date, datetime
from typing import Callable, List, Optional, Sequence
import uuid

from sqlmodel import Session
import structlog

from agenda.core.config import Settings, get_settings
from agenda.core.exceptions import BadRequestError
from agenda.repositories import appointments as appointment_repo
from agenda.repositories import calendar as calendar_repo
from agenda.scheduling.slots import Slot, generate_slots
from agenda.services.catalog import CatalogService

logger = structlog.get_logger(__name__)


class AvailabilityService:
    def __init__(
        self,
        session: Session,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.clock = clock
        self.catalog = CatalogService(session, self.settings, clock)

    def list_available_slots(
        self,
        tenant_id: uuid.UUID,
        day: date,
        service_ids: Sequence[uuid.UUID],
        exclude_appointment_id: Optional[uuid.UUID] = None,
        interval_minutes: Optional[int] = None,
    ) -> List[Slot]:
        """Free start times on ``day`` for the combined duration of ``service_ids``.

        Raises BadRequestError for a past date or an inactive service and
        NotFoundError for a service of another tenant. A day off or a weekday
        without active working hours yields an empty list.
        """
        now = self.clock()
        if day < now.date():
            raise BadRequestError(f"Cannot list availability for past date {day.isoformat()}")

        services = self.catalog.get_bookable_services(tenant_id, service_ids)
        duration = sum(service.duration_minutes for service in services)

        day_off = calendar_repo.get_day_off(self.session, tenant_id, day)
        if day_off:
            logger.info(f"No availability for tenant {tenant_id} on {day}: day off")
            return []

        hours = calendar_repo.get_working_hours(self.session, tenant_id, day.weekday())
        if hours is None or not hours.is_active:
            logger.info(f"No availability for tenant {tenant_id} on {day}: closed on weekday {day.weekday()}")
            return []

        interval = interval_minutes or self.settings.SLOT_INTERVAL_MINUTES
        if interval <= 0:
            raise BadRequestError("Slot interval must be positive")

        booked = appointment_repo.list_appointments_for_date(self.session, tenant_id, day)
        slots = generate_slots(
            day,
            hours.opens_at,
            hours.closes_at,
            duration,
            interval,
            booked=booked,
            recommended_start=self.settings.RECOMMENDED_WINDOW_START,
            recommended_end=self.settings.RECOMMENDED_WINDOW_END,
            not_before=now if day == now.date() else None,
            exclude_appointment_id=exclude_appointment_id,
        )

        logger.info(
            f"Availability for tenant {tenant_id} on {day}: {len(slots)} slots "
            f"({duration} min, {interval} min grid, {len(booked)} booked)"
        )
        return slots

"""
Conflict validator: overlap of a candidate range with a tenant's day
"""

from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import Session
import structlog

from agenda.core.exceptions import ConflictError
from agenda.models.appointment import Appointment
from agenda.repositories import appointments as appointment_repo
from agenda.scheduling.conflicts import find_overlap

logger = structlog.get_logger(__name__)


class ConflictService:
    """Checks candidate ranges against the active appointments of their start day"""

    def __init__(self, session: Session):
        self.session = session

    def find_conflict(
        self,
        tenant_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[uuid.UUID] = None,
    ) -> Optional[Appointment]:
        booked = appointment_repo.list_appointments_for_date(self.session, tenant_id, start.date())
        return find_overlap(start, end, booked, exclude_appointment_id)

    def has_conflict(
        self,
        tenant_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[uuid.UUID] = None,
    ) -> bool:
        return self.find_conflict(tenant_id, start, end, exclude_appointment_id) is not None

    def ensure_no_conflict(
        self,
        tenant_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Raise ConflictError naming the overlapping booking"""
        conflict = self.find_conflict(tenant_id, start, end, exclude_appointment_id)
        if conflict is None:
            return

        logger.info(
            f"Slot conflict for tenant {tenant_id}: {start:%Y-%m-%d %H:%M}-{end:%H:%M} "
            f"overlaps appointment {conflict.id}"
        )
        raise ConflictError(
            f"{start:%H:%M}-{end:%H:%M} conflicts with an existing appointment "
            f"from {conflict.start_at:%H:%M}-{conflict.end_at:%H:%M}",
            conflicting_appointment_id=conflict.id,
        )

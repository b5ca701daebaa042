"""
Working hours and day-off management
"""

from datetime import date, datetime, time
from typing import List, Optional
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
import structlog

from agenda.core.exceptions import BadRequestError, NotFoundError
from agenda.models.day_off import DayOff
from agenda.models.working_hours import WEEKDAY_NAMES, WorkingHours
from agenda.repositories import calendar as calendar_repo

logger = structlog.get_logger(__name__)


def _validate_window(weekday: int, opens_at: time, closes_at: time) -> None:
    if not 0 <= weekday <= 6:
        raise BadRequestError(f"Weekday must be between 0 (Monday) and 6 (Sunday), got {weekday}")
    if closes_at <= opens_at:
        raise BadRequestError(
            f"Closing time {closes_at:%H:%M} must be after opening time {opens_at:%H:%M}"
        )


class CalendarService:
    """Writes to the calendar configuration enforce one governing entry per weekday"""

    def __init__(self, session: Session):
        self.session = session

    # Working hours

    def get_working_hours(self, tenant_id: uuid.UUID, weekday: int) -> Optional[WorkingHours]:
        return calendar_repo.get_working_hours(self.session, tenant_id, weekday)

    def list_working_hours(self, tenant_id: uuid.UUID) -> List[WorkingHours]:
        return calendar_repo.list_working_hours(self.session, tenant_id)

    def set_working_hours(
        self,
        tenant_id: uuid.UUID,
        weekday: int,
        opens_at: time,
        closes_at: time,
        is_active: bool = True,
    ) -> WorkingHours:
        """Create or replace the entry of a weekday"""
        _validate_window(weekday, opens_at, closes_at)

        existing = calendar_repo.get_working_hours(self.session, tenant_id, weekday)
        if existing is not None:
            self._reject_overlap(existing, weekday, opens_at, closes_at)
            existing.opens_at = opens_at
            existing.closes_at = closes_at
            existing.is_active = is_active
            existing.updated_at = datetime.utcnow()
            entry = existing
            action = "replaced"
        else:
            entry = WorkingHours(
                tenant_id=tenant_id,
                weekday=weekday,
                opens_at=opens_at,
                closes_at=closes_at,
                is_active=is_active,
            )
            action = "created"

        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)

        logger.info(f"Working hours {action} for tenant {tenant_id}: {WEEKDAY_NAMES[weekday]} {entry.describe()}")
        return entry

    def update_working_hours(
        self,
        tenant_id: uuid.UUID,
        entry_id: uuid.UUID,
        weekday: Optional[int] = None,
        opens_at: Optional[time] = None,
        closes_at: Optional[time] = None,
        is_active: Optional[bool] = None,
    ) -> WorkingHours:
        entry = calendar_repo.get_working_hours_by_id(self.session, tenant_id, entry_id)
        if entry is None:
            raise NotFoundError("Working hours entry not found")

        new_weekday = entry.weekday if weekday is None else weekday
        new_opens = opens_at or entry.opens_at
        new_closes = closes_at or entry.closes_at
        _validate_window(new_weekday, new_opens, new_closes)

        if new_weekday != entry.weekday:
            other = calendar_repo.get_working_hours(self.session, tenant_id, new_weekday)
            if other is not None and other.id != entry.id:
                raise BadRequestError(
                    f"{WEEKDAY_NAMES[new_weekday]} already has working hours {other.describe()}"
                )

        entry.weekday = new_weekday
        entry.opens_at = new_opens
        entry.closes_at = new_closes
        if is_active is not None:
            entry.is_active = is_active
        entry.updated_at = datetime.utcnow()

        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)

        logger.info(f"Working hours updated: {entry.id}")
        return entry

    def delete_working_hours(self, tenant_id: uuid.UUID, entry_id: uuid.UUID) -> None:
        entry = calendar_repo.get_working_hours_by_id(self.session, tenant_id, entry_id)
        if entry is None:
            raise NotFoundError("Working hours entry not found")

        self.session.delete(entry)
        self.session.commit()
        logger.info(f"Working hours deleted for tenant {tenant_id}: {WEEKDAY_NAMES[entry.weekday]}")

    @staticmethod
    def _reject_overlap(existing: WorkingHours, weekday: int, opens_at: time, closes_at: time) -> None:
        if existing.is_active and existing.overlaps(opens_at, closes_at):
            raise BadRequestError(
                f"Working hours {opens_at:%H:%M}-{closes_at:%H:%M} overlap the existing "
                f"{WEEKDAY_NAMES[weekday]} entry {existing.describe()}"
            )

    # Days off

    def get_day_off(self, tenant_id: uuid.UUID, day: date) -> Optional[DayOff]:
        return calendar_repo.get_day_off(self.session, tenant_id, day)

    def list_days_off(
        self,
        tenant_id: uuid.UUID,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[DayOff]:
        return calendar_repo.list_days_off(self.session, tenant_id, start, end)

    def add_day_off(self, tenant_id: uuid.UUID, day: date, reason: Optional[str] = None) -> DayOff:
        if calendar_repo.get_day_off(self.session, tenant_id, day) is not None:
            raise BadRequestError(f"{day.isoformat()} is already a day off")

        day_off = DayOff(tenant_id=tenant_id, day=day, reason=reason)
        self.session.add(day_off)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise BadRequestError(f"{day.isoformat()} is already a day off")
        self.session.refresh(day_off)

        logger.info(f"Day off added for tenant {tenant_id}: {day}")
        return day_off

    def remove_day_off(self, tenant_id: uuid.UUID, day_off_id: uuid.UUID) -> None:
        day_off = calendar_repo.get_day_off_by_id(self.session, tenant_id, day_off_id)
        if day_off is None:
            raise NotFoundError("Day off not found")

        self.session.delete(day_off)
        self.session.commit()
        logger.info(f"Day off removed for tenant {tenant_id}: {day_off.day}")

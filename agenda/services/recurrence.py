"""
Recurrence expander and series operations

A series is a parent appointment carrying the rule plus the children
generated from it. Children point back to the parent for lookup only.
Series operations only ever touch children starting after "now"; the parent
is changed through the single-appointment operations.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional
import uuid

from sqlmodel import Session
import structlog

from agenda.core.config import Settings, get_settings
from agenda.core.events import DomainEvent, SeriesCanceled, SeriesGenerated, SeriesUpdated
from agenda.core.exceptions import BadRequestError, NotFoundError
from agenda.core.locks import tenant_days_lock
from agenda.models.appointment import Appointment, AppointmentState
from agenda.models.appointment_service_line import AppointmentServiceLine
from agenda.repositories import appointments as appointment_repo
from agenda.scheduling.recurrence import RecurrenceRule, occurrence_starts
from agenda.scheduling.times import as_naive_utc
from agenda.services.conflicts import ConflictService

logger = structlog.get_logger(__name__)

SERIES_PATCH_FIELDS = ("notes", "price", "state")


def copy_service_lines(lines: List[AppointmentServiceLine]) -> List[AppointmentServiceLine]:
    return [
        AppointmentServiceLine(
            service_id=line.service_id,
            name=line.name,
            duration_minutes=line.duration_minutes,
            price=line.price,
            position=line.position,
        )
        for line in lines
    ]


class RecurrenceService:
    def __init__(
        self,
        session: Session,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
        events: Optional[List[DomainEvent]] = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.clock = clock
        self.conflicts = ConflictService(session)
        self.events = events if events is not None else []

    def expand_series(self, parent: Appointment) -> List[Appointment]:
        """Unsaved children of a recurring parent, ordered by start"""
        if not parent.is_recurring or not parent.recurrence_pattern:
            raise BadRequestError("Appointment is not a recurring series parent")

        try:
            rule = RecurrenceRule.from_appointment(parent)
        except ValueError as e:
            raise BadRequestError(str(e))

        starts = occurrence_starts(
            parent.start_at,
            rule,
            default_max=self.settings.RECURRENCE_MAX_OCCURRENCES,
            horizon_years=self.settings.RECURRENCE_HORIZON_YEARS,
        )
        duration = parent.end_at - parent.start_at

        children = []
        for start in starts:
            child = Appointment(
                tenant_id=parent.tenant_id,
                client_id=parent.client_id,
                created_by=parent.created_by,
                start_at=start,
                end_at=start + duration,
                state=AppointmentState.PENDING,
                notes=parent.notes,
                price=parent.price,
                is_recurring=False,
                parent_appointment_id=parent.id,
            )
            child.service_lines = copy_service_lines(parent.service_lines)
            children.append(child)
        return children

    def generate_series(self, parent: Appointment, commit: bool = True) -> List[Appointment]:
        """Expand and persist the children of ``parent``.

        With RECURRENCE_VALIDATE_CHILDREN enabled, a child overlapping an
        active appointment is skipped, so the series may come out shorter
        than the rule allows.
        """
        children = self.expand_series(parent)

        if self.settings.RECURRENCE_VALIDATE_CHILDREN:
            tenant_days_lock(self.session, parent.tenant_id, [child.start_at.date() for child in children])
            accepted = []
            for child in children:
                conflict = self.conflicts.find_conflict(parent.tenant_id, child.start_at, child.end_at)
                if conflict is not None:
                    logger.warning(
                        f"Series {parent.id}: skipped {child.start_at:%Y-%m-%d %H:%M}, "
                        f"overlaps appointment {conflict.id}"
                    )
                    continue
                self.session.add(child)
                self.session.flush()
                accepted.append(child)
            children = accepted
        else:
            self.session.add_all(children)

        if commit:
            self.session.commit()
        else:
            self.session.flush()

        self.events.append(SeriesGenerated(
            parent_id=parent.id,
            tenant_id=parent.tenant_id,
            child_ids=[child.id for child in children],
        ))
        logger.info(
            f"Series generated for appointment {parent.id}: {len(children)} children "
            f"({parent.recurrence_pattern.value})"
        )
        return children

    def get_series(self, tenant_id: uuid.UUID, parent_id: uuid.UUID) -> List[Appointment]:
        """Parent followed by its children, ordered by start"""
        parent = self._get_parent(tenant_id, parent_id)
        children = appointment_repo.list_series_children(self.session, tenant_id, parent.id)
        return [parent] + children

    def cancel_series(
        self,
        tenant_id: uuid.UUID,
        parent_id: uuid.UUID,
        now: Optional[datetime] = None,
    ) -> int:
        """Cancel every future, non-terminal child. Returns the number canceled."""
        parent = self._get_parent(tenant_id, parent_id)
        now = as_naive_utc(now) or self.clock()

        canceled = 0
        for child in appointment_repo.list_series_children(self.session, tenant_id, parent.id, starting_after=now):
            if child.is_terminal():
                continue
            child.transition_to(AppointmentState.CANCELED)
            self.session.add(child)
            canceled += 1

        self.session.commit()
        self.events.append(SeriesCanceled(parent_id=parent.id, tenant_id=tenant_id, canceled_count=canceled))
        logger.info(f"Series {parent.id} canceled: {canceled} future children")
        return canceled

    def update_series(
        self,
        tenant_id: uuid.UUID,
        parent_id: uuid.UUID,
        patch: Mapping[str, Any],
        now: Optional[datetime] = None,
    ) -> int:
        """Apply notes, price and state to every future child.

        The state is only applied where the transition is valid for that
        child. Returns the number of children that changed.
        """
        changes = self._validate_patch(patch)
        parent = self._get_parent(tenant_id, parent_id)
        now = as_naive_utc(now) or self.clock()
        new_state = changes.get("state")

        updated = 0
        for child in appointment_repo.list_series_children(self.session, tenant_id, parent.id, starting_after=now):
            touched = False
            if "notes" in changes:
                child.notes = changes["notes"]
                touched = True
            if "price" in changes:
                child.price = changes["price"]
                touched = True
            if new_state is not None:
                allowed, _ = child.can_transition_to(new_state)
                if allowed:
                    child.transition_to(new_state)
                    touched = True
            if touched:
                child.updated_at = datetime.utcnow()
                self.session.add(child)
                updated += 1

        self.session.commit()
        self.events.append(SeriesUpdated(
            parent_id=parent.id,
            tenant_id=tenant_id,
            updated_count=updated,
            changed_fields=sorted(changes),
        ))
        logger.info(f"Series {parent.id} updated: {updated} future children ({', '.join(sorted(changes))})")
        return updated

    def _get_parent(self, tenant_id: uuid.UUID, parent_id: uuid.UUID) -> Appointment:
        parent = appointment_repo.get_appointment(self.session, tenant_id, parent_id)
        if parent is None:
            raise NotFoundError("Appointment not found")
        if not parent.is_recurring:
            raise BadRequestError("Appointment is not a recurring series parent")
        return parent

    @staticmethod
    def _validate_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = set(patch) - set(SERIES_PATCH_FIELDS)
        if unknown:
            raise BadRequestError(f"Unsupported series fields: {', '.join(sorted(unknown))}")

        changes = dict(patch)
        if "price" in changes:
            if changes["price"] is None:
                raise BadRequestError("Price cannot be empty")
            changes["price"] = Decimal(str(changes["price"]))
            if changes["price"] < 0:
                raise BadRequestError("Price cannot be negative")
        if "state" in changes:
            try:
                changes["state"] = AppointmentState.parse(changes["state"])
            except ValueError as e:
                raise BadRequestError(str(e))
        if not changes:
            raise BadRequestError("Nothing to update")
        return changes

"""
Tests for the slot grid walk and the availability calculator
"""

import pytest
from datetime import date, datetime, time, timedelta

from agenda.core.exceptions import BadRequestError, NotFoundError
from agenda.models import AppointmentState
from agenda.scheduling.slots import generate_slots
from agenda.services.availability import AvailabilityService
from agenda.services.conflicts import ConflictService
from tests.conftest import FIXED_NOW, fixed_clock
from tests.factories import (
    make_appointment, make_client, make_day_off, make_service, make_working_hours
)

MONDAY = date(2026, 10, 26)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute))


class TestGenerateSlots:
    """Pure grid walk"""

    def test_empty_day_yields_every_grid_point(self):
        slots = generate_slots(MONDAY, time(9, 0), time(17, 0), 30, 15)

        assert len(slots) == 31
        assert slots[0].start == at(MONDAY, 9)
        assert slots[-1].start == at(MONDAY, 16, 30)
        assert slots[-1].end == at(MONDAY, 17)

    def test_slots_are_ascending(self):
        slots = generate_slots(MONDAY, time(9, 0), time(12, 0), 45, 15)
        starts = [slot.start for slot in slots]

        assert starts == sorted(starts)

    def test_slot_ending_exactly_at_close_is_included(self):
        slots = generate_slots(MONDAY, time(9, 0), time(10, 0), 60, 30)

        assert [slot.label for slot in slots] == ["09:00"]

    def test_duration_longer_than_window(self):
        assert generate_slots(MONDAY, time(9, 0), time(10, 0), 90, 15) == []

    def test_recommended_window_is_inclusive(self):
        slots = generate_slots(
            MONDAY, time(9, 0), time(17, 0), 30, 30,
            recommended_start=time(10, 0), recommended_end=time(16, 0),
        )
        recommended = {slot.label: slot.recommended for slot in slots}

        assert recommended["09:30"] is False
        assert recommended["10:00"] is True
        assert recommended["16:00"] is True
        assert recommended["16:30"] is False

    def test_slots_at_or_before_not_before_are_dropped(self):
        slots = generate_slots(MONDAY, time(9, 0), time(11, 0), 30, 30, not_before=at(MONDAY, 9, 30))

        assert [slot.label for slot in slots] == ["10:00", "10:30"]

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            generate_slots(MONDAY, time(9, 0), time(11, 0), 30, 0)


class TestAvailabilityService:
    """Availability calculator against the calendar and the ledger"""

    @pytest.fixture
    def haircut(self, db, tenant):
        return make_service(db, tenant.id, "Haircut", 30)

    @pytest.fixture
    def client(self, db, tenant):
        return make_client(db, tenant.id)

    def service(self, db, settings):
        return AvailabilityService(db, settings, clock=fixed_clock)

    def test_full_day_without_bookings(self, db, settings, tenant, haircut):
        make_working_hours(db, tenant.id, 0, time(9, 0), time(17, 0))

        slots = self.service(db, settings).list_available_slots(tenant.id, MONDAY, [haircut.id])

        assert len(slots) == 31
        assert slots[0].label == "09:00"
        assert slots[-1].label == "16:30"

    def test_day_off_returns_nothing(self, db, settings, tenant, haircut):
        make_working_hours(db, tenant.id, 0, time(9, 0), time(17, 0))
        make_day_off(db, tenant.id, MONDAY)

        assert self.service(db, settings).list_available_slots(tenant.id, MONDAY, [haircut.id]) == []

    def test_no_working_hours_returns_nothing(self, db, settings, tenant, haircut):
        assert self.service(db, settings).list_available_slots(tenant.id, MONDAY, [haircut.id]) == []

    def test_inactive_working_hours_returns_nothing(self, db, settings, tenant, haircut):
        make_working_hours(db, tenant.id, 0, time(9, 0), time(17, 0), is_active=False)

        assert self.service(db, settings).list_available_slots(tenant.id, MONDAY, [haircut.id]) == []

    def test_every_slot_passes_the_conflict_validator(self, db, settings, tenant, haircut, client):
        make_working_hours(db, tenant.id, 0, time(9, 0), time(17, 0))
        make_appointment(db, tenant.id, client.id, at(MONDAY, 10), minutes=45)
        make_appointment(db, tenant.id, client.id, at(MONDAY, 13, 10), minutes=50)

        slots = self.service(db, settings).list_available_slots(tenant.id, MONDAY, [haircut.id])
        conflicts = ConflictService(db)

        assert slots
        for slot in slots:
            assert conflicts.has_conflict(tenant.id, slot.start, slot.end) is False

    def test_monday_scenario_with_existing_booking(self, db, settings, tenant, client):
        make_working_hours(db, tenant.id, 0, time(9, 0), time(12, 0))
        hour_long = make_service(db, tenant.id, "Massage", 60)
        make_appointment(db, tenant.id, client.id, at(MONDAY, 10), minutes=60)

        slots = self.service(db, settings).list_available_slots(tenant.id, MONDAY, [hour_long.id])

        # 11:00-12:00 touches the booking and ends exactly at closing time
        assert [slot.label for slot in slots] == ["09:00", "11:00"]

    def test_monday_scenario_on_hour_grid(self, db, settings, tenant, client):
        make_working_hours(db, tenant.id, 0, time(9, 0), time(12, 0))
        hour_long = make_service(db, tenant.id, "Massage", 60)
        make_appointment(db, tenant.id, client.id, at(MONDAY, 10), minutes=60)

        slots = self.service(db, settings).list_available_slots(
            tenant.id, MONDAY, [hour_long.id], interval_minutes=60
        )

        assert [slot.label for slot in slots] == ["09:00", "11:00"]

    def test_canceled_booking_does_not_block(self, db, settings, tenant, client):
        make_working_hours(db, tenant.id, 0, time(9, 0), time(10, 0))
        hour_long = make_service(db, tenant.id, "Massage", 60)
        make_appointment(db, tenant.id, client.id, at(MONDAY, 9), state=AppointmentState.CANCELED)

        slots = self.service(db, settings).list_available_slots(tenant.id, MONDAY, [hour_long.id])

        assert [slot.label for slot in slots] == ["09:00"]

    def test_services_are_aggregated(self, db, settings, tenant, haircut):
        make_working_hours(db, tenant.id, 0, time(9, 0), time(10, 30))
        color = make_service(db, tenant.id, "Color", 60)

        slots = self.service(db, settings).list_available_slots(tenant.id, MONDAY, [haircut.id, color.id])

        assert [slot.label for slot in slots] == ["09:00"]
        assert slots[0].end == at(MONDAY, 10, 30)

    def test_excluded_appointment_does_not_block_itself(self, db, settings, tenant, haircut, client):
        make_working_hours(db, tenant.id, 0, time(9, 0), time(10, 0))
        own = make_appointment(db, tenant.id, client.id, at(MONDAY, 9), minutes=60)

        blocked = self.service(db, settings).list_available_slots(tenant.id, MONDAY, [haircut.id])
        moving = self.service(db, settings).list_available_slots(
            tenant.id, MONDAY, [haircut.id], exclude_appointment_id=own.id
        )

        assert blocked == []
        assert [slot.label for slot in moving] == ["09:00", "09:15", "09:30"]

    def test_today_drops_past_start_times(self, db, settings, tenant, haircut):
        today = FIXED_NOW.date()
        make_working_hours(db, tenant.id, today.weekday(), time(7, 0), time(9, 0))

        slots = self.service(db, settings).list_available_slots(tenant.id, today, [haircut.id])

        assert [slot.label for slot in slots] == ["08:15", "08:30"]

    def test_past_date_is_rejected(self, db, settings, tenant, haircut):
        yesterday = FIXED_NOW.date() - timedelta(days=1)

        with pytest.raises(BadRequestError):
            self.service(db, settings).list_available_slots(tenant.id, yesterday, [haircut.id])

    def test_inactive_service_is_rejected(self, db, settings, tenant, haircut):
        haircut.deactivate()
        db.add(haircut)
        db.commit()

        with pytest.raises(BadRequestError):
            self.service(db, settings).list_available_slots(tenant.id, MONDAY, [haircut.id])

    def test_service_of_another_tenant_is_not_found(self, db, settings, tenant, other_tenant):
        foreign = make_service(db, other_tenant.id, "Foreign", 30)

        with pytest.raises(NotFoundError):
            self.service(db, settings).list_available_slots(tenant.id, MONDAY, [foreign.id])

    def test_at_least_one_service_is_required(self, db, settings, tenant):
        with pytest.raises(BadRequestError):
            self.service(db, settings).list_available_slots(tenant.id, MONDAY, [])

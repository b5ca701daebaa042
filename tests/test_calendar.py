"""
Tests for working hours and day-off management
"""

import pytest
from datetime import date, time
import uuid

from agenda.core.exceptions import BadRequestError, NotFoundError
from agenda.services.calendar import CalendarService


class TestWorkingHours:
    def test_set_creates_entry(self, db, tenant):
        calendar = CalendarService(db)

        entry = calendar.set_working_hours(tenant.id, 0, time(9, 0), time(17, 0))

        assert calendar.get_working_hours(tenant.id, 0).id == entry.id
        assert calendar.get_working_hours(tenant.id, 1) is None

    def test_closing_must_follow_opening(self, db, tenant):
        with pytest.raises(BadRequestError):
            CalendarService(db).set_working_hours(tenant.id, 0, time(17, 0), time(9, 0))
        with pytest.raises(BadRequestError):
            CalendarService(db).set_working_hours(tenant.id, 0, time(9, 0), time(9, 0))

    def test_weekday_range(self, db, tenant):
        with pytest.raises(BadRequestError):
            CalendarService(db).set_working_hours(tenant.id, 7, time(9, 0), time(17, 0))

    def test_overlapping_active_entry_is_rejected(self, db, tenant):
        calendar = CalendarService(db)
        calendar.set_working_hours(tenant.id, 2, time(9, 0), time(13, 0))

        with pytest.raises(BadRequestError) as exc_info:
            calendar.set_working_hours(tenant.id, 2, time(12, 0), time(18, 0))

        assert "12:00-18:00" in exc_info.value.detail
        assert "09:00-13:00" in exc_info.value.detail

    def test_non_overlapping_entry_replaces_the_old_one(self, db, tenant):
        calendar = CalendarService(db)
        calendar.set_working_hours(tenant.id, 2, time(9, 0), time(13, 0))

        calendar.set_working_hours(tenant.id, 2, time(14, 0), time(18, 0))

        entries = calendar.list_working_hours(tenant.id)
        assert len(entries) == 1
        assert (entries[0].opens_at, entries[0].closes_at) == (time(14, 0), time(18, 0))

    def test_inactive_entry_can_be_replaced(self, db, tenant):
        calendar = CalendarService(db)
        calendar.set_working_hours(tenant.id, 4, time(9, 0), time(13, 0), is_active=False)

        entry = calendar.set_working_hours(tenant.id, 4, time(10, 0), time(12, 0))

        assert entry.is_active is True
        assert len(calendar.list_working_hours(tenant.id)) == 1

    def test_update_excludes_itself(self, db, tenant):
        calendar = CalendarService(db)
        entry = calendar.set_working_hours(tenant.id, 0, time(9, 0), time(17, 0))

        updated = calendar.update_working_hours(tenant.id, entry.id, closes_at=time(18, 0))

        assert updated.closes_at == time(18, 0)

    def test_update_to_taken_weekday_is_rejected(self, db, tenant):
        calendar = CalendarService(db)
        monday = calendar.set_working_hours(tenant.id, 0, time(9, 0), time(17, 0))
        calendar.set_working_hours(tenant.id, 1, time(9, 0), time(17, 0))

        with pytest.raises(BadRequestError):
            calendar.update_working_hours(tenant.id, monday.id, weekday=1)

    def test_update_validates_window(self, db, tenant):
        calendar = CalendarService(db)
        entry = calendar.set_working_hours(tenant.id, 0, time(9, 0), time(17, 0))

        with pytest.raises(BadRequestError):
            calendar.update_working_hours(tenant.id, entry.id, opens_at=time(18, 0))

    def test_delete(self, db, tenant):
        calendar = CalendarService(db)
        entry = calendar.set_working_hours(tenant.id, 0, time(9, 0), time(17, 0))

        calendar.delete_working_hours(tenant.id, entry.id)

        assert calendar.list_working_hours(tenant.id) == []

    def test_other_tenant_entry_is_not_found(self, db, tenant, other_tenant):
        entry = CalendarService(db).set_working_hours(tenant.id, 0, time(9, 0), time(17, 0))

        with pytest.raises(NotFoundError):
            CalendarService(db).delete_working_hours(other_tenant.id, entry.id)


class TestDaysOff:
    def test_add_and_list(self, db, tenant):
        calendar = CalendarService(db)
        calendar.add_day_off(tenant.id, date(2026, 12, 25), "Christmas")
        calendar.add_day_off(tenant.id, date(2027, 1, 1), "New year")

        december = calendar.list_days_off(tenant.id, date(2026, 12, 1), date(2026, 12, 31))

        assert [day_off.reason for day_off in december] == ["Christmas"]
        assert len(calendar.list_days_off(tenant.id)) == 2
        assert calendar.get_day_off(tenant.id, date(2026, 12, 25)) is not None

    def test_duplicate_date_is_rejected(self, db, tenant):
        calendar = CalendarService(db)
        calendar.add_day_off(tenant.id, date(2026, 12, 25))

        with pytest.raises(BadRequestError):
            calendar.add_day_off(tenant.id, date(2026, 12, 25))

    def test_remove(self, db, tenant):
        calendar = CalendarService(db)
        day_off = calendar.add_day_off(tenant.id, date(2026, 12, 25))

        calendar.remove_day_off(tenant.id, day_off.id)

        assert calendar.get_day_off(tenant.id, date(2026, 12, 25)) is None

    def test_remove_unknown(self, db, tenant):
        with pytest.raises(NotFoundError):
            CalendarService(db).remove_day_off(tenant.id, uuid.uuid4())

"""
Unit tests for appointment state machine
"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
import uuid

from agenda.models.appointment import Appointment, AppointmentState


def make(state: AppointmentState) -> Appointment:
    start = datetime(2026, 10, 26, 10, 0)
    return Appointment(
        id=uuid.uuid4(),
        tenant_id=uuid.uuid4(),
        client_id=uuid.uuid4(),
        start_at=start,
        end_at=start + timedelta(minutes=30),
        state=state,
        price=Decimal("10.00"),
    )


class TestAppointmentStateMachine:
    """Test appointment state transitions"""

    @pytest.mark.parametrize("source,target", [
        (AppointmentState.PENDING, AppointmentState.CONFIRMED),
        (AppointmentState.PENDING, AppointmentState.COMPLETED),
        (AppointmentState.PENDING, AppointmentState.CANCELED),
        (AppointmentState.CONFIRMED, AppointmentState.COMPLETED),
        (AppointmentState.CONFIRMED, AppointmentState.CANCELED),
    ])
    def test_allowed_transitions(self, source, target):
        appointment = make(source)

        allowed, _ = appointment.can_transition_to(target)
        appointment.transition_to(target)

        assert allowed is True
        assert appointment.state == target

    @pytest.mark.parametrize("source,target", [
        (AppointmentState.CONFIRMED, AppointmentState.PENDING),
        (AppointmentState.COMPLETED, AppointmentState.CANCELED),
        (AppointmentState.COMPLETED, AppointmentState.PENDING),
        (AppointmentState.CANCELED, AppointmentState.CONFIRMED),
        (AppointmentState.CANCELED, AppointmentState.COMPLETED),
        (AppointmentState.PENDING, AppointmentState.PENDING),
    ])
    def test_rejected_transitions(self, source, target):
        appointment = make(source)

        allowed, reason = appointment.can_transition_to(target)

        assert allowed is False
        assert source.value in reason
        with pytest.raises(ValueError):
            appointment.transition_to(target)
        assert appointment.state == source

    def test_cancel_sets_timestamp(self):
        appointment = make(AppointmentState.CONFIRMED)
        appointment.transition_to(AppointmentState.CANCELED)

        assert appointment.canceled_at is not None
        assert appointment.is_active() is False

    def test_complete_sets_timestamp(self):
        appointment = make(AppointmentState.PENDING)
        appointment.transition_to(AppointmentState.COMPLETED)

        assert appointment.completed_at is not None
        assert appointment.is_terminal() is True

    def test_pending_and_confirmed_are_not_terminal(self):
        assert make(AppointmentState.PENDING).is_terminal() is False
        assert make(AppointmentState.CONFIRMED).is_terminal() is False

    def test_duration(self):
        assert make(AppointmentState.PENDING).duration_minutes == 30


class TestAppointmentStateParsing:
    def test_parse_is_case_insensitive(self):
        assert AppointmentState.parse("CONFIRMED") == AppointmentState.CONFIRMED
        assert AppointmentState.parse(" canceled ") == AppointmentState.CANCELED

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            AppointmentState.parse("archived")

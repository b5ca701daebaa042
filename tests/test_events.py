"""
Tests for the domain event bus
"""

import pytest
from datetime import datetime
import uuid

from agenda.core.events import (
    AppointmentCreated, EventBus, SeriesCanceled, SeriesGenerated
)


@pytest.fixture
def bus():
    return EventBus()


def created_event() -> AppointmentCreated:
    return AppointmentCreated(
        appointment_id=uuid.uuid4(),
        tenant_id=uuid.uuid4(),
        client_id=uuid.uuid4(),
        start_at=datetime(2026, 10, 26, 10, 0),
        end_at=datetime(2026, 10, 26, 10, 30),
    )


@pytest.mark.asyncio
async def test_subscribers_receive_events(bus):
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe("AppointmentCreated", handler)
    event = created_event()
    await bus.publish(event)

    assert received == [event]


@pytest.mark.asyncio
async def test_publish_all_keeps_order(bus):
    received = []

    async def handler(event):
        received.append(type(event).__name__)

    bus.subscribe("AppointmentCreated", handler)
    bus.subscribe("SeriesGenerated", handler)
    tenant_id = uuid.uuid4()
    await bus.publish_all([
        created_event(),
        SeriesGenerated(parent_id=uuid.uuid4(), tenant_id=tenant_id, child_ids=[uuid.uuid4()]),
    ])

    assert received == ["AppointmentCreated", "SeriesGenerated"]


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others(bus):
    received = []

    async def broken(event):
        raise RuntimeError("reminder queue down")

    async def handler(event):
        received.append(event)

    bus.subscribe("AppointmentCreated", broken)
    bus.subscribe("AppointmentCreated", handler)
    await bus.publish(created_event())

    assert len(received) == 1


@pytest.mark.asyncio
async def test_unsubscribe(bus):
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe("AppointmentCreated", handler)
    bus.unsubscribe("AppointmentCreated", handler)
    await bus.publish(created_event())

    assert received == []


def test_event_serialization():
    parent_id = uuid.uuid4()
    data = SeriesCanceled(parent_id=parent_id, tenant_id=uuid.uuid4(), canceled_count=3).to_dict()

    assert data["event_type"] == "SeriesCanceled"
    assert data["parent_id"] == str(parent_id)
    assert data["canceled_count"] == 3

    created = created_event().to_dict()
    assert created["start_at"] == "2026-10-26T10:00:00"
    assert created["is_recurring"] is False

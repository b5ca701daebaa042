"""
Domain events system

Booking events are the narrow interface towards reminders, notifications and
any other collaborator that reacts to calendar changes. Collaborators
subscribe to the bus; the engine only publishes.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import uuid
import structlog

logger = structlog.get_logger(__name__)


class DomainEvent:
    """Base class for domain events"""

    def __init__(self, tenant_id: uuid.UUID, event_id: uuid.UUID = None):
        self.event_id = event_id or uuid.uuid4()
        self.tenant_id = tenant_id
        self.occurred_at = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary"""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "event_type": self.__class__.__name__,
            "tenant_id": str(self.tenant_id),
        }


class AppointmentCreated(DomainEvent):
    """Event fired when a booking is accepted (subscribers enqueue reminders)"""

    def __init__(
        self,
        appointment_id: uuid.UUID,
        tenant_id: uuid.UUID,
        client_id: uuid.UUID,
        start_at: datetime,
        end_at: datetime,
        is_recurring: bool = False,
        event_id: uuid.UUID = None
    ):
        super().__init__(tenant_id, event_id)
        self.appointment_id = appointment_id
        self.client_id = client_id
        self.start_at = start_at
        self.end_at = end_at
        self.is_recurring = is_recurring

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "appointment_id": str(self.appointment_id),
            "client_id": str(self.client_id),
            "start_at": self.start_at.isoformat(),
            "end_at": self.end_at.isoformat(),
            "is_recurring": self.is_recurring,
        })
        return data


class AppointmentUpdated(DomainEvent):
    """Event fired when time, services or details of an appointment change"""

    def __init__(
        self,
        appointment_id: uuid.UUID,
        tenant_id: uuid.UUID,
        changed_fields: List[str],
        event_id: uuid.UUID = None
    ):
        super().__init__(tenant_id, event_id)
        self.appointment_id = appointment_id
        self.changed_fields = changed_fields

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "appointment_id": str(self.appointment_id),
            "changed_fields": list(self.changed_fields),
        })
        return data


class AppointmentStateChanged(DomainEvent):
    """Event fired on every state transition, cancellation included"""

    def __init__(
        self,
        appointment_id: uuid.UUID,
        tenant_id: uuid.UUID,
        state: str,
        previous_state: Optional[str] = None,
        event_id: uuid.UUID = None
    ):
        super().__init__(tenant_id, event_id)
        self.appointment_id = appointment_id
        self.state = state
        self.previous_state = previous_state

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "appointment_id": str(self.appointment_id),
            "state": self.state,
            "previous_state": self.previous_state,
        })
        return data


class SeriesGenerated(DomainEvent):
    """Event fired after the children of a recurring appointment are stored"""

    def __init__(
        self,
        parent_id: uuid.UUID,
        tenant_id: uuid.UUID,
        child_ids: List[uuid.UUID],
        event_id: uuid.UUID = None
    ):
        super().__init__(tenant_id, event_id)
        self.parent_id = parent_id
        self.child_ids = child_ids

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "parent_id": str(self.parent_id),
            "child_ids": [str(child_id) for child_id in self.child_ids],
        })
        return data


class SeriesCanceled(DomainEvent):
    """Event fired when the future children of a series are canceled"""

    def __init__(
        self,
        parent_id: uuid.UUID,
        tenant_id: uuid.UUID,
        canceled_count: int,
        event_id: uuid.UUID = None
    ):
        super().__init__(tenant_id, event_id)
        self.parent_id = parent_id
        self.canceled_count = canceled_count

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "parent_id": str(self.parent_id),
            "canceled_count": self.canceled_count,
        })
        return data


class SeriesUpdated(DomainEvent):
    """Event fired when a patch is applied to the future children of a series"""

    def __init__(
        self,
        parent_id: uuid.UUID,
        tenant_id: uuid.UUID,
        updated_count: int,
        changed_fields: List[str],
        event_id: uuid.UUID = None
    ):
        super().__init__(tenant_id, event_id)
        self.parent_id = parent_id
        self.updated_count = updated_count
        self.changed_fields = changed_fields

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "parent_id": str(self.parent_id),
            "updated_count": self.updated_count,
            "changed_fields": list(self.changed_fields),
        })
        return data


class EventBus:
    """Simple in-memory event bus for publishing domain events"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, handler: Callable):
        """Subscribe to a specific event type"""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)
        logger.debug(f"Subscribed handler to event type: {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable):
        """Unsubscribe from an event type"""
        if event_type in self._subscribers:
            self._subscribers[event_type].remove(handler)
            logger.debug(f"Unsubscribed handler from event type: {event_type}")

    async def publish(self, event: DomainEvent):
        """Publish an event to all subscribers"""
        event_type = event.__class__.__name__
        handlers = self._subscribers.get(event_type, [])

        if not handlers:
            logger.debug(f"No subscribers for event type: {event_type}")
            return

        logger.info(f"Publishing event {event_type}: {event.event_id}")

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                # The booking is already committed at this point
                logger.error(f"Error in event handler for {event_type}: {e}", exc_info=True)

    async def publish_all(self, events: List[DomainEvent]):
        for event in events:
            await self.publish(event)

    def clear_subscribers(self):
        """Clear all subscribers (useful for testing)"""
        self._subscribers.clear()
        logger.debug("Cleared all event subscribers")


# Global event bus instance
event_bus = EventBus()

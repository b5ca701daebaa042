"""
Appointment model with state machine and recurrence metadata
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import Column, Index, JSON, Numeric
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING
from decimal import Decimal
from enum import Enum
import uuid

if TYPE_CHECKING:
    from agenda.models.appointment_service_line import AppointmentServiceLine


class AppointmentState(str, Enum):
    """Status of an appointment"""
    PENDING = "pending"             # Booked, not yet confirmed by the business
    CONFIRMED = "confirmed"         # Confirmed with the client
    COMPLETED = "completed"         # Service delivered
    CANCELED = "canceled"           # Frees the slot; never deleted

    @classmethod
    def parse(cls, value: str) -> "AppointmentState":
        """Parse a state name or value, case-insensitive"""
        normalized = (value or "").strip().lower()
        for state in cls:
            if normalized in (state.value, state.name.lower()):
                return state
        raise ValueError(f"Invalid appointment state: {value}")


class RecurrencePattern(str, Enum):
    """How the next occurrence of a series is computed"""
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    CUSTOM = "custom"


VALID_TRANSITIONS = {
    AppointmentState.PENDING: [AppointmentState.CONFIRMED, AppointmentState.COMPLETED, AppointmentState.CANCELED],
    AppointmentState.CONFIRMED: [AppointmentState.COMPLETED, AppointmentState.CANCELED],
    AppointmentState.COMPLETED: [],  # Final state
    AppointmentState.CANCELED: [],  # Final state
}


class Appointment(SQLModel, table=True):
    """One scheduled occupation of a tenant's calendar"""

    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointment_tenant_start", "tenant_id", "start_at"),
        Index("idx_appointment_parent", "parent_appointment_id", "start_at"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(
        foreign_key="tenants.id",
        index=True,
        description="Tenant ID for multi-tenant isolation"
    )
    client_id: uuid.UUID = Field(
        foreign_key="clients.id",
        index=True,
        description="Client the appointment is booked for"
    )
    created_by: Optional[uuid.UUID] = Field(
        default=None,
        foreign_key="users.id",
        description="Staff user who booked it"
    )

    # Time range, end = start + sum of service line durations
    start_at: datetime = Field(index=True)
    end_at: datetime

    state: AppointmentState = Field(
        default=AppointmentState.PENDING,
        index=True,
        description="Current status of the appointment"
    )

    notes: Optional[str] = Field(default=None, max_length=2000)
    price: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False),
    )

    # Recurrence rule (parents only)
    is_recurring: bool = Field(default=False)
    recurrence_pattern: Optional[RecurrencePattern] = Field(default=None)
    recurrence_weekdays: Optional[List[int]] = Field(
        default=None,
        description="Weekdays for WEEKLY series, 0=Monday..6=Sunday",
        sa_column=Column(JSON, nullable=True),
    )
    recurrence_interval_days: Optional[int] = Field(default=None, description="Step for CUSTOM series")
    recurrence_max_occurrences: Optional[int] = Field(default=None)
    recurrence_end_at: Optional[datetime] = Field(default=None)

    # Series back-reference (children only). Lookup only, never ownership.
    parent_appointment_id: Optional[uuid.UUID] = Field(
        default=None,
        foreign_key="appointments.id",
        description="Parent of a generated series child"
    )

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
    canceled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    service_lines: List["AppointmentServiceLine"] = Relationship(
        back_populates="appointment",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "AppointmentServiceLine.position",
            "lazy": "selectin",
        },
    )

    # State machine methods
    def can_transition_to(self, new_state: AppointmentState) -> tuple[bool, str]:
        """Check if appointment can transition to new state"""
        if new_state in VALID_TRANSITIONS.get(self.state, []):
            return True, "Can transition"
        return False, f"Cannot transition from {self.state.value} to {new_state.value}"

    def transition_to(self, new_state: AppointmentState) -> None:
        """Move to a new state or raise ValueError"""
        allowed, reason = self.can_transition_to(new_state)
        if not allowed:
            raise ValueError(reason)

        now = datetime.utcnow()
        self.state = new_state
        self.updated_at = now
        if new_state == AppointmentState.CANCELED:
            self.canceled_at = now
        elif new_state == AppointmentState.COMPLETED:
            self.completed_at = now

    def is_terminal(self) -> bool:
        return self.state in (AppointmentState.COMPLETED, AppointmentState.CANCELED)

    def is_active(self) -> bool:
        """Active appointments occupy the calendar"""
        return self.state != AppointmentState.CANCELED

    def is_series_child(self) -> bool:
        return self.parent_appointment_id is not None

    @property
    def duration_minutes(self) -> int:
        return int((self.end_at - self.start_at).total_seconds() // 60)

    @property
    def service_ids(self) -> List[uuid.UUID]:
        return [line.service_id for line in self.service_lines]

"""
API schemas for appointments, series and availability
"""

from sqlmodel import SQLModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Union
import uuid

from agenda.models.appointment import AppointmentState, RecurrencePattern
from agenda.scheduling.recurrence import RecurrenceRule, parse_weekdays


class RecurrenceIn(SQLModel):
    pattern: RecurrencePattern
    weekdays: Optional[List[Union[int, str]]] = Field(
        default=None,
        description="0=Monday..6=Sunday or day abbreviations (LUN, MAR, ...)"
    )
    interval_days: int = Field(default=1, ge=1)
    max_occurrences: Optional[int] = Field(default=None, ge=1)
    end_date: Optional[date] = None

    def to_rule(self) -> RecurrenceRule:
        return RecurrenceRule(
            pattern=self.pattern,
            weekdays=parse_weekdays(self.weekdays),
            interval_days=self.interval_days,
            max_occurrences=self.max_occurrences,
            end_at=datetime.combine(self.end_date, datetime.min.time()) if self.end_date else None,
        )


class AppointmentCreate(SQLModel):
    client_id: uuid.UUID
    service_ids: List[uuid.UUID]
    start_at: datetime
    notes: Optional[str] = Field(default=None, max_length=2000)
    price: Optional[Decimal] = Field(default=None, ge=0)
    recurrence: Optional[RecurrenceIn] = None


class AppointmentUpdate(SQLModel):
    client_id: Optional[uuid.UUID] = None
    service_ids: Optional[List[uuid.UUID]] = None
    start_at: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=2000)
    price: Optional[Decimal] = Field(default=None, ge=0)


class AppointmentStateUpdate(SQLModel):
    state: str = Field(description="pending, confirmed, completed or canceled")


class ServiceLineRead(SQLModel):
    service_id: uuid.UUID
    name: str
    duration_minutes: int
    price: Decimal
    position: int


class AppointmentRead(SQLModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    client_id: uuid.UUID
    created_by: Optional[uuid.UUID] = None
    start_at: datetime
    end_at: datetime
    state: AppointmentState
    notes: Optional[str] = None
    price: Decimal
    is_recurring: bool
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_weekdays: Optional[List[int]] = None
    recurrence_interval_days: Optional[int] = None
    recurrence_max_occurrences: Optional[int] = None
    recurrence_end_at: Optional[datetime] = None
    parent_appointment_id: Optional[uuid.UUID] = None
    service_lines: List[ServiceLineRead] = []
    created_at: datetime
    updated_at: Optional[datetime] = None


class SeriesUpdate(SQLModel):
    notes: Optional[str] = Field(default=None, max_length=2000)
    price: Optional[Decimal] = Field(default=None, ge=0)
    state: Optional[str] = None


class SeriesCountRead(SQLModel):
    parent_id: uuid.UUID
    affected: int


class SlotRead(SQLModel):
    start: datetime
    end: datetime
    recommended: bool
    label: str


class AvailabilityRead(SQLModel):
    day: date
    slots: List[SlotRead]

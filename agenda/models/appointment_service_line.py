"""
Service line of an appointment (duration and price captured at booking time)
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import Column, Numeric
from typing import Optional, TYPE_CHECKING
from decimal import Decimal
import uuid

if TYPE_CHECKING:
    from agenda.models.appointment import Appointment


class AppointmentServiceLine(SQLModel, table=True):
    """One booked service inside an appointment"""

    __tablename__ = "appointment_service_lines"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    appointment_id: uuid.UUID = Field(foreign_key="appointments.id", index=True)
    service_id: uuid.UUID = Field(foreign_key="services.id", index=True)

    # Snapshot of the catalog entry
    name: str = Field(max_length=255)
    duration_minutes: int
    price: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False),
    )
    position: int = Field(default=0, description="Order in which services are performed")

    appointment: Optional["Appointment"] = Relationship(back_populates="service_lines")

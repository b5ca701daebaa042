"""
Half-open interval overlap
"""

from datetime import datetime
from typing import Iterable, Optional
import uuid


def intervals_overlap(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """True when [start, end) and [other_start, other_end) share any instant.

    Touching endpoints (one range ending exactly where the other begins)
    do not overlap, and the predicate is symmetric in its two ranges.
    """
    return start < other_end and end > other_start


def find_overlap(
    start: datetime,
    end: datetime,
    appointments: Iterable,
    exclude_appointment_id: Optional[uuid.UUID] = None,
):
    """Return the first appointment overlapping [start, end), or None"""
    for appointment in appointments:
        if exclude_appointment_id is not None and appointment.id == exclude_appointment_id:
            continue
        if intervals_overlap(start, end, appointment.start_at, appointment.end_at):
            return appointment
    return None

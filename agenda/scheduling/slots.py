"""
Slot grid walk over a single day's working window
"""

from datetime import date, datetime, time, timedelta
from typing import Iterator, List, NamedTuple, Optional, Sequence

from agenda.scheduling.conflicts import find_overlap


class Slot(NamedTuple):
    start: datetime
    end: datetime
    recommended: bool
    label: str


def generate_slots(
    day: date,
    opens_at: time,
    closes_at: time,
    duration_minutes: int,
    interval_minutes: int,
    booked: Sequence = (),
    recommended_start: Optional[time] = None,
    recommended_end: Optional[time] = None,
    not_before: Optional[datetime] = None,
    exclude_appointment_id=None,
) -> List[Slot]:
    """Walk the window from open to close - duration inclusive.

    ``booked`` is the day's snapshot of active appointments, checked with
    the same overlap predicate as the conflict validator. Candidates whose
    start is at or before ``not_before`` are dropped.
    """
    return list(_walk(
        day, opens_at, closes_at, duration_minutes, interval_minutes, booked,
        recommended_start, recommended_end, not_before, exclude_appointment_id,
    ))


def _walk(
    day, opens_at, closes_at, duration_minutes, interval_minutes, booked,
    recommended_start, recommended_end, not_before, exclude_appointment_id,
) -> Iterator[Slot]:
    if duration_minutes <= 0:
        raise ValueError("Duration must be positive")
    if interval_minutes <= 0:
        raise ValueError("Slot interval must be positive")

    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=interval_minutes)
    current = datetime.combine(day, opens_at)
    close = datetime.combine(day, closes_at)

    while current + duration <= close:
        end = current + duration
        if not_before is not None and current <= not_before:
            current += step
            continue
        if find_overlap(current, end, booked, exclude_appointment_id) is None:
            yield Slot(
                start=current,
                end=end,
                recommended=_is_recommended(current.time(), recommended_start, recommended_end),
                label=current.strftime("%H:%M"),
            )
        current += step


def _is_recommended(start: time, window_start: Optional[time], window_end: Optional[time]) -> bool:
    if window_start is None or window_end is None:
        return False
    return window_start <= start <= window_end

"""
Recurrence rule expansion

Produces the start times of a series' children from the parent's start and
its rule. Month-based patterns are computed from the parent's start (the
anchor) so a series starting on the 31st lands on the last day of shorter
months and returns to the 31st afterwards instead of drifting.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from agenda.models.appointment import RecurrencePattern
from agenda.scheduling.times import as_naive_utc

DEFAULT_MAX_OCCURRENCES = 52
DEFAULT_HORIZON_YEARS = 1

# Spanish and English day abbreviations, Monday first
WEEKDAY_ALIASES = {
    "LUN": 0, "MON": 0,
    "MAR": 1, "TUE": 1,
    "MIE": 2, "WED": 2,
    "JUE": 3, "THU": 3,
    "VIE": 4, "FRI": 4,
    "SAB": 5, "SAT": 5,
    "DOM": 6, "SUN": 6,
}

_MONTH_STEPS = {
    RecurrencePattern.MONTHLY: 1,
    RecurrencePattern.QUARTERLY: 3,
}


def parse_weekdays(values: Optional[Iterable[Union[int, str]]]) -> Tuple[int, ...]:
    """Normalize a weekday set to sorted ints 0=Monday..6=Sunday.

    Accepts ints, digit strings and day abbreviations (``LUN``, ``mie``,
    ``Fri``...). Raises ValueError on anything else.
    """
    if not values:
        return ()

    result = set()
    for value in values:
        if isinstance(value, bool):
            raise ValueError(f"Invalid weekday: {value}")
        if isinstance(value, int):
            day = value
        else:
            token = str(value).strip().upper()
            if token.isdigit():
                day = int(token)
            elif token[:3] in WEEKDAY_ALIASES:
                day = WEEKDAY_ALIASES[token[:3]]
            else:
                raise ValueError(f"Invalid weekday: {value}")
        if not 0 <= day <= 6:
            raise ValueError(f"Weekday must be between 0 and 6, got {day}")
        result.add(day)
    return tuple(sorted(result))


def end_of_day(value: Union[date, datetime]) -> datetime:
    """Inclusive end bound for a recurrence end date"""
    if isinstance(value, datetime):
        value = as_naive_utc(value).date()
    return datetime.combine(value, time(23, 59, 59))


@dataclass(frozen=True)
class RecurrenceRule:
    pattern: RecurrencePattern
    weekdays: Tuple[int, ...] = ()
    interval_days: int = 1
    max_occurrences: Optional[int] = None
    end_at: Optional[datetime] = None

    def __post_init__(self):
        if self.interval_days < 1:
            raise ValueError("Recurrence interval must be at least one day")
        if self.max_occurrences is not None and self.max_occurrences < 1:
            raise ValueError("Maximum occurrences must be at least 1")

    @classmethod
    def from_appointment(cls, appointment) -> "RecurrenceRule":
        """Rebuild the rule stored on a series parent"""
        if not appointment.recurrence_pattern:
            raise ValueError("Appointment carries no recurrence rule")
        return cls(
            pattern=RecurrencePattern(appointment.recurrence_pattern),
            weekdays=parse_weekdays(appointment.recurrence_weekdays),
            interval_days=appointment.recurrence_interval_days or 1,
            max_occurrences=appointment.recurrence_max_occurrences,
            end_at=appointment.recurrence_end_at,
        )

    def resolved_limits(
        self,
        start: datetime,
        default_max: int = DEFAULT_MAX_OCCURRENCES,
        horizon_years: int = DEFAULT_HORIZON_YEARS,
    ) -> Tuple[int, datetime]:
        """Occurrence cap and end bound, falling back to the defaults"""
        max_occurrences = self.max_occurrences or default_max
        end_at = as_naive_utc(self.end_at) or (start + relativedelta(years=horizon_years))
        return max_occurrences, end_at


def next_occurrence(current: datetime, rule: RecurrenceRule) -> datetime:
    """Occurrence following ``current`` under ``rule``"""
    pattern = rule.pattern

    if pattern == RecurrencePattern.DAILY:
        return current + timedelta(days=1)

    if pattern == RecurrencePattern.WEEKLY:
        if not rule.weekdays:
            return current + timedelta(days=7)
        candidate = current
        for _ in range(7):
            candidate += timedelta(days=1)
            if candidate.weekday() in rule.weekdays:
                return candidate
        return current + timedelta(days=7)

    if pattern == RecurrencePattern.BIWEEKLY:
        return current + timedelta(days=14)

    if pattern in _MONTH_STEPS:
        return current + relativedelta(months=_MONTH_STEPS[pattern])

    if pattern == RecurrencePattern.CUSTOM:
        return current + timedelta(days=rule.interval_days or 1)

    raise ValueError(f"Unsupported recurrence pattern: {pattern}")


def occurrence_starts(
    start: datetime,
    rule: RecurrenceRule,
    default_max: int = DEFAULT_MAX_OCCURRENCES,
    horizon_years: int = DEFAULT_HORIZON_YEARS,
) -> List[datetime]:
    """Start times of the children of a series beginning at ``start``.

    The parent's own start is not included. Expansion stops at whichever
    bound is hit first: the occurrence cap or the end date.
    """
    return list(_iter_starts(start, rule, default_max, horizon_years))


def _iter_starts(start, rule, default_max, horizon_years) -> Iterator[datetime]:
    start = as_naive_utc(start)
    max_occurrences, end_at = rule.resolved_limits(start, default_max, horizon_years)
    months = _MONTH_STEPS.get(rule.pattern)

    count = 0
    current = start
    while count < max_occurrences and current < end_at:
        if months:
            current = start + relativedelta(months=months * (count + 1))
        else:
            current = next_occurrence(current, rule)
        if current > end_at:
            break
        yield current
        count += 1

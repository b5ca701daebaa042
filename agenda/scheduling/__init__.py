"""
Pure scheduling algorithms (no database access)
"""

from agenda.scheduling.conflicts import intervals_overlap, find_overlap
from agenda.scheduling.slots import Slot, generate_slots
from agenda.scheduling.recurrence import (
    RecurrenceRule, parse_weekdays, next_occurrence, occurrence_starts
)

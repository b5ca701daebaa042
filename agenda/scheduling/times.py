"""
Datetime normalization for the appointment ledger

The ledger stores naive datetimes. Values carrying an offset are converted
to UTC and stripped before they are compared with anything stored.
"""

from datetime import datetime, timezone
from typing import Optional


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

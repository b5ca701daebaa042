"""
Per tenant-day serialization for the fetch -> validate -> persist sequence

Two bookings for the same tenant and calendar day must not both validate
against the same snapshot. On PostgreSQL a transaction scoped advisory lock
is taken; it is released automatically on commit or rollback. SQLite (tests,
local tooling) already serializes writers, so the call only logs there.
"""

from datetime import date
import hashlib
import uuid

from sqlalchemy import text
from sqlmodel import Session
import structlog

logger = structlog.get_logger(__name__)


def tenant_day_lock_key(tenant_id: uuid.UUID, day: date) -> int:
    """Stable signed 64-bit key for pg_advisory_xact_lock"""
    digest = hashlib.blake2b(f"{tenant_id}:{day.isoformat()}".encode(), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


def tenant_day_lock(session: Session, tenant_id: uuid.UUID, day: date) -> None:
    """Block until this transaction owns the tenant-day booking lock"""
    dialect = session.get_bind().dialect.name
    if dialect != "postgresql":
        logger.debug(f"Tenant-day lock skipped on {dialect}: {tenant_id} {day}")
        return

    key = tenant_day_lock_key(tenant_id, day)
    session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})
    logger.debug(f"Tenant-day lock acquired: {tenant_id} {day}")


def tenant_days_lock(session: Session, tenant_id: uuid.UUID, days) -> None:
    """Lock several days in ascending order so concurrent callers never deadlock"""
    for day in sorted(set(days)):
        tenant_day_lock(session, tenant_id, day)

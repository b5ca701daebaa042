"""
Tests for the tenant-day booking lock
"""

from datetime import date
import uuid

from agenda.core.locks import tenant_day_lock, tenant_day_lock_key, tenant_days_lock


def test_lock_key_is_stable_and_signed_64_bit():
    tenant_id = uuid.UUID("6f1c2a9e-3b4d-4c5e-8f60-718293a4b5c6")

    key = tenant_day_lock_key(tenant_id, date(2026, 10, 26))

    assert key == tenant_day_lock_key(tenant_id, date(2026, 10, 26))
    assert -(2 ** 63) <= key < 2 ** 63


def test_lock_key_differs_per_day_and_tenant():
    tenant_id = uuid.uuid4()

    keys = {
        tenant_day_lock_key(tenant_id, date(2026, 10, 26)),
        tenant_day_lock_key(tenant_id, date(2026, 10, 27)),
        tenant_day_lock_key(uuid.uuid4(), date(2026, 10, 26)),
    }

    assert len(keys) == 3


def test_lock_is_a_no_op_on_sqlite(db, tenant):
    tenant_day_lock(db, tenant.id, date(2026, 10, 26))
    tenant_days_lock(db, tenant.id, [date(2026, 10, 27), date(2026, 10, 26), date(2026, 10, 27)])

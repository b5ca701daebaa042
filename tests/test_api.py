"""
HTTP level tests: routing, auth, permissions and error rendering
"""

import pytest
from datetime import date, datetime, time, timedelta
from fastapi.testclient import TestClient
import uuid

from agenda.core.auth import create_access_token
from agenda.core.database import get_session
from agenda.main import app
from agenda.models import UserRole
from tests.factories import (
    make_appointment, make_client, make_service, make_user, make_working_hours
)

API = "/api/v1"


def next_monday() -> date:
    today = date.today()
    return today + timedelta(days=7 - today.weekday())


@pytest.fixture
def client(db):
    def override_session():
        yield db

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(tenant, role: str = "owner", user_id=None) -> dict:
    token = create_access_token(user_id or uuid.uuid4(), tenant.id, role)
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_missing_token_is_rejected(client):
    response = client.get(f"{API}/appointments/")

    assert response.status_code in (401, 403)


def test_invalid_token_is_rejected(client):
    response = client.get(f"{API}/appointments/", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_receptionist_cannot_manage_schedule(client, tenant):
    response = client.put(
        f"{API}/calendar/working-hours",
        json={"weekday": 0, "opens_at": "09:00:00", "closes_at": "17:00:00"},
        headers=auth_headers(tenant, "recepcionista"),
    )

    assert response.status_code == 403


def test_owner_sets_working_hours(client, tenant):
    response = client.put(
        f"{API}/calendar/working-hours",
        json={"weekday": 0, "opens_at": "09:00:00", "closes_at": "17:00:00"},
        headers=auth_headers(tenant),
    )

    assert response.status_code == 200
    assert response.json()["weekday"] == 0


def test_invalid_window_renders_error_body(client, tenant):
    response = client.put(
        f"{API}/calendar/working-hours",
        json={"weekday": 0, "opens_at": "17:00:00", "closes_at": "09:00:00"},
        headers=auth_headers(tenant),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "bad_request"


def test_create_appointment_and_conflict(client, db, tenant):
    customer = make_client(db, tenant.id)
    haircut = make_service(db, tenant.id, duration_minutes=30)
    user = make_user(db, tenant.id, UserRole.RECEPTIONIST)
    headers = auth_headers(tenant, "recepcionista", user_id=user.id)
    start = datetime.combine(next_monday(), time(10, 0))
    payload = {
        "client_id": str(customer.id),
        "service_ids": [str(haircut.id)],
        "start_at": start.isoformat(),
    }

    created = client.post(f"{API}/appointments/", json=payload, headers=headers)

    assert created.status_code == 201
    body = created.json()
    assert body["state"] == "pending"
    assert body["end_at"] == (start + timedelta(minutes=30)).isoformat()
    assert body["service_lines"][0]["name"] == "Haircut"

    clash = client.post(f"{API}/appointments/", json=payload, headers=headers)

    assert clash.status_code == 409
    assert clash.json()["error"] == "conflict"
    assert clash.json()["conflicting_appointment_id"] == body["id"]


def test_appointment_of_other_tenant_is_not_found(client, db, tenant, other_tenant):
    customer = make_client(db, tenant.id)
    appointment = make_appointment(db, tenant.id, customer.id, datetime.combine(next_monday(), time(10, 0)))

    response = client.get(f"{API}/appointments/{appointment.id}", headers=auth_headers(other_tenant))

    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "detail": "Appointment not found"}


def test_state_change(client, db, tenant):
    customer = make_client(db, tenant.id)
    appointment = make_appointment(db, tenant.id, customer.id, datetime.combine(next_monday(), time(10, 0)))
    headers = auth_headers(tenant)

    confirmed = client.post(
        f"{API}/appointments/{appointment.id}/state", json={"state": "CONFIRMED"}, headers=headers
    )
    back = client.post(
        f"{API}/appointments/{appointment.id}/state", json={"state": "pending"}, headers=headers
    )

    assert confirmed.status_code == 200
    assert confirmed.json()["state"] == "confirmed"
    assert back.status_code == 400


def test_availability(client, db, tenant):
    monday = next_monday()
    customer = make_client(db, tenant.id)
    haircut = make_service(db, tenant.id, duration_minutes=30)
    make_working_hours(db, tenant.id, 0, time(9, 0), time(11, 0))
    make_appointment(db, tenant.id, customer.id, datetime.combine(monday, time(9, 0)), minutes=30)

    response = client.get(
        f"{API}/availability/",
        params={"day": monday.isoformat(), "service_ids": [str(haircut.id)], "interval_minutes": 30},
        headers=auth_headers(tenant, "empleado"),
    )

    assert response.status_code == 200
    labels = [slot["label"] for slot in response.json()["slots"]]
    assert labels == ["09:30", "10:00", "10:30"]


def test_client_quota_renders_402(client, db, tenant):
    for i in range(50):
        make_client(db, tenant.id, first_name=f"Client {i}")

    response = client.post(
        f"{API}/catalog/clients", json={"first_name": "One more"}, headers=auth_headers(tenant)
    )

    assert response.status_code == 402
    assert response.json()["error"] == "quota_exceeded"
    assert response.json()["kind"] == "clientes"
    assert response.json()["limit"] == 50


def test_usage_summary(client, db, tenant):
    make_client(db, tenant.id)

    response = client.get(f"{API}/plans/usage", headers=auth_headers(tenant))

    assert response.status_code == 200
    assert response.json()["resources"]["clientes"]["current"] == 1


def test_feature_check(client, tenant):
    response = client.get(f"{API}/plans/features/sms_whatsapp", headers=auth_headers(tenant))

    assert response.status_code == 200
    assert response.json() == {"feature": "sms_whatsapp", "enabled": False}

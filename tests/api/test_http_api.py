from __future__ import annotations

import math

import pytest

from src.hris_payroll.hris_payroll.core.enums import AttendanceStatus, SubscriptionStatus
from src.hris_payroll.hris_payroll.main import create_app
from tests.fakes import OFFICE_LAT, OFFICE_LON, World


@pytest.fixture
def client(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(world.services)
    return app.test_client()


def login(client, user_id: int, role: str, company_id=World.COMPANY_ID):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role
        if company_id is not None:
            sess["company_id"] = company_id


def as_employee(client):
    login(client, World.EMPLOYEE_ID, "employee")


def as_admin(client):
    login(client, World.ADMIN_ID, "admin")


def test_requests_without_session_get_401(client):
    res = client.get("/api/attendance/today")

    assert res.status_code == 401
    assert res.get_json()["code"] == "AUTHENTICATION_REQUIRED"


def test_employee_clock_in(client):
    as_employee(client)

    res = client.post("/api/attendance/clock", json={"type": "In", "latitude": OFFICE_LAT, "longitude": OFFICE_LON})

    body = res.get_json()
    assert res.status_code == 200
    assert body["success"] is True
    assert body["data"]["status"] == "OnTime"
    assert body["data"]["clock_in"] == "2025-03-03 07:55:00"


def test_out_of_range_clock_in_reports_distance(client):
    as_employee(client)
    far = OFFICE_LAT + math.degrees(150 / 6_371_000)

    res = client.post("/api/attendance/clock", json={"type": "In", "latitude": far, "longitude": OFFICE_LON})

    body = res.get_json()
    assert res.status_code == 400
    assert body["code"] == "OUT_OF_RANGE"
    assert body["distance_m"] == pytest.approx(150, abs=0.5)
    assert body["radius_m"] == 100


def test_expired_subscription_is_403(client, world):
    world.add_company(World.COMPANY_ID, subscription=SubscriptionStatus.EXPIRED)
    as_employee(client)

    res = client.post("/api/attendance/clock", json={"type": "In", "latitude": OFFICE_LAT, "longitude": OFFICE_LON})

    assert res.status_code == 403
    assert res.get_json()["code"] == "SUBSCRIPTION_EXPIRED"


def test_employee_cannot_manage_payroll(client):
    as_employee(client)

    res = client.get("/api/payroll")

    assert res.status_code == 403
    assert res.get_json()["code"] == "FORBIDDEN"


def test_superadmin_must_name_the_company(client):
    login(client, 99, "superadmin", company_id=None)

    assert client.get("/api/payroll").status_code == 400
    assert client.get("/api/payroll?company_id=1").status_code == 200


def test_leave_review_flow(client, world):
    as_employee(client)
    res = client.post(
        "/api/leaves",
        json={"type": "Annual", "start_date": "2025-03-10", "end_date": "2025-03-14", "reason": "Wedding"},
    )
    assert res.status_code == 201
    leave_id = res.get_json()["data"]["leave_id"]

    as_admin(client)
    res = client.put(f"/api/leaves/{leave_id}/review", json={"status": "Approved"})
    assert res.status_code == 200
    assert res.get_json()["data"]["status"] == "Approved"

    res = client.put(f"/api/leaves/{leave_id}/review", json={"status": "Rejected", "rejected_reason": "late"})
    assert res.status_code == 409
    assert res.get_json()["code"] == "ALREADY_PROCESSED"

    assert world.employee().leave_balance == 7


def test_employee_sees_only_own_leaves(client, world):
    world.add_employee(6)
    world.services.leave_service.submit_leave_request(
        employee_id=6, leave_type="Sick", start_date=world.clock.now.date(), end_date=world.clock.now.date()
    )
    as_employee(client)

    res = client.get("/api/leaves")

    assert res.get_json()["data"] == []


def test_manual_correction_over_http(client, world):
    row = world.add_attendance(
        work_date=world.clock.now.date(),
        status=AttendanceStatus.ABSENT,
    )
    as_admin(client)

    res = client.put(
        f"/api/attendance/{row.attendance_id}",
        json={"status": "Late", "reason": "Forgot to clock", "clock_in": "08:45", "clock_out": "17:00"},
    )

    data = res.get_json()["data"]
    assert res.status_code == 200
    assert data["late_duration_minutes"] == 45
    assert data["work_hours"] == "8.25"


def test_payroll_generate_and_csv_export(client):
    as_admin(client)

    res = client.post("/api/payroll/generate", json={"month": 3, "year": 2025})
    assert res.status_code == 201
    assert res.get_json()["data"] == {"created": 1, "skipped": 0}

    res = client.get("/api/reports/payroll.csv?month=3&year=2025")
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    text = res.data.decode("utf-8-sig")
    assert text.splitlines()[0].startswith("payroll_id,employee_id,full_name")
    assert "Budi Santoso" in text


def test_payslip_of_another_employee_is_forbidden(client, world):
    world.add_employee(6)
    world.services.payroll_service.generate_payroll_period(
        actor_id=World.ADMIN_ID, company_id=World.COMPANY_ID, month=3, year=2025
    )
    other = max(world.store.payrolls)
    as_employee(client)

    res = client.get(f"/api/payroll/{other}")

    assert res.status_code == 403


def test_invalid_payroll_transition_is_409(client, world):
    world.services.payroll_service.generate_payroll_period(
        actor_id=World.ADMIN_ID, company_id=World.COMPANY_ID, month=3, year=2025
    )
    payroll_id = min(world.store.payrolls)
    as_admin(client)

    res = client.put(f"/api/payroll/{payroll_id}/status", json={"status": "Paid"})

    assert res.status_code == 409
    assert res.get_json()["code"] == "INVALID_TRANSITION"


def test_unknown_route_returns_json_404(client):
    as_admin(client)

    res = client.get("/api/nowhere")

    assert res.status_code == 404
    assert res.get_json()["success"] is False


def test_global_payroll_log_is_superadmin_only(client, world):
    world.services.payroll_service.generate_payroll_period(
        actor_id=World.ADMIN_ID, company_id=World.COMPANY_ID, month=3, year=2025
    )

    as_admin(client)
    assert client.get("/api/payroll/global-logs").status_code == 403

    login(client, 99, "superadmin", company_id=None)
    res = client.get("/api/payroll/global-logs?limit=5")

    assert res.status_code == 200
    [entry] = res.get_json()["data"]
    assert entry["employee_id"] == World.EMPLOYEE_ID

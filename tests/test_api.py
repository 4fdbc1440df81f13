from __future__ import annotations

import pytest

from src.leave_system.leave_system.main import create_app


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


def _apply(client, **overrides):
    body = {
        "employeeId": "F-PHY-01",
        "firstName": "Ravi",
        "leaveType": "Sick Leave",
        "type": "Faculty",
        "startDate": "2024-06-10",
        "endDate": "2024-06-12",
        "leaveDuration": "Full Day",
        "reason": "Fever",
    }
    body.update(overrides)
    return client.post("/api/leaves/apply", json=body)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_apply_returns_created_leave(client):
    resp = _apply(client)

    assert resp.status_code == 201
    data = resp.get_json()
    assert data["leaveId"] == 1
    assert data["leave"]["status"] == "Pending"
    assert data["leave"]["leaveDays"] == 3
    assert data["leave"]["department"] == "Physics"
    assert data["leave"]["hodDecision"] is None


def test_apply_missing_fields_is_400(client):
    resp = client.post("/api/leaves/apply", json={"employeeId": "F-PHY-01"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"


def test_apply_accepts_form_data(client):
    resp = client.post(
        "/api/leaves/apply",
        data={
            "employeeId": "S-ADM-01",
            "firstName": "Kiran",
            "leaveType": "Casual Leave",
            "type": "Staff",
            "startDate": "2024-06-10",
            "endDate": "2024-06-10",
            "leaveDuration": "Half Day",
            "reason": "Errand",
        },
    )
    assert resp.status_code == 201
    assert resp.get_json()["leave"]["status"] == "HOD Approved"


def test_od_apply_carries_event_details(client):
    resp = client.post(
        "/api/leaves/odleave/apply",
        json={
            "employeeId": "F-PHY-01",
            "firstName": "Ravi",
            "leaveType": "Conference",
            "startDate": "2024-06-10",
            "endDate": "2024-06-11",
            "leaveDuration": "Full Day",
            "reason": "Paper presentation",
            "eventName": "ICP 2024",
            "location": "Pune",
        },
    )
    assert resp.status_code == 201
    leave = resp.get_json()["leave"]
    assert leave["leaveCategory"] == "OD"
    assert leave["eventName"] == "ICP 2024"
    assert leave["location"] == "Pune"


def test_full_approval_flow_and_summary(client):
    leave_id = _apply(client).get_json()["leaveId"]

    resp = client.put(f"/api/leaves/hod/{leave_id}", json={"decision": "Approved", "hodEmployeeId": "H-PHY"})
    assert resp.status_code == 200
    assert resp.get_json()["leave"]["status"] == "HOD Approved"

    resp = client.put(
        f"/api/leaves/principal/{leave_id}",
        json={"decision": "Approved", "comment": "Get well", "principalEmployeeId": "P001"},
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["leave"]["status"] == "Principal Approved"
    assert body["leave"]["principalDecision"]["comment"] == "Get well"

    summary = client.get("/api/leaves/summary/F-PHY-01").get_json()
    assert summary["monthlyLeaves"] == [{"year": 2024, "month": 6, "days": 3}]
    assert summary["yearlyLeaves"] == [{"year": 2024, "days": 3}]


def test_principal_before_hod_is_409_with_current_status(client):
    leave_id = _apply(client).get_json()["leaveId"]

    resp = client.put(f"/api/leaves/principal/{leave_id}", json={"decision": "Approved", "principalEmployeeId": "P001"})

    assert resp.status_code == 409
    body = resp.get_json()
    assert body["error"] == "InvalidTransition"
    assert body["currentStatus"] == "Pending"


def test_hod_twice_is_409_already_decided(client):
    leave_id = _apply(client).get_json()["leaveId"]
    client.put(f"/api/leaves/hod/{leave_id}", json={"decision": "Approved", "hodEmployeeId": "H-PHY"})

    resp = client.put(f"/api/leaves/hod/{leave_id}", json={"decision": "Rejected", "hodEmployeeId": "H-PHY"})

    assert resp.status_code == 409
    assert resp.get_json()["error"] == "AlreadyDecided"


def test_hod_of_other_department_is_403(client):
    leave_id = _apply(client).get_json()["leaveId"]
    resp = client.put(f"/api/leaves/hod/{leave_id}", json={"decision": "Approved", "hodEmployeeId": "H-CHE"})
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "Forbidden"


def test_unknown_leave_is_404(client):
    assert client.get("/api/leaves/99").status_code == 404
    resp = client.put("/api/leaves/hod/99", json={"decision": "Approved", "hodEmployeeId": "H-PHY"})
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NotFound"


def test_listing_endpoints(client):
    first = _apply(client).get_json()["leaveId"]
    second = _apply(client, employeeId="S-ADM-01", type="Staff").get_json()["leaveId"]

    mine = client.get("/api/leaves/my-leaves/F-PHY-01").get_json()["leaves"]
    assert [l["id"] for l in mine] == [first]

    hod_queue = client.get("/api/leaves/hod/Physics").get_json()
    assert [l["id"] for l in hod_queue] == [first]

    principal_queue = client.get("/api/leaves/principal").get_json()
    assert [l["id"] for l in principal_queue] == [second]

    assert len(client.get("/api/leaves/all").get_json()) == 2
    assert client.get("/api/leaves/all?variant=OD").get_json() == []
    assert client.get("/api/leaves/all?variant=bogus").status_code == 400


def test_statistics_endpoint(client):
    _apply(client)
    body = client.get("/api/leaves/management/statistics").get_json()
    assert body["success"] is True
    assert body["summary"]["Regular"]["Pending"] == 1
    assert body["employees"][0]["employee_id"] == "F-PHY-01"


def test_summary_for_employee_without_approvals_is_404(client):
    assert client.get("/api/leaves/summary/F-PHY-01").status_code == 404


@pytest.mark.parametrize("body", [[1, 2], "Approved", 3])
def test_non_object_json_body_is_400(client, body):
    leave_id = _apply(client).get_json()["leaveId"]

    resp = client.put(f"/api/leaves/hod/{leave_id}", json=body)

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"
    assert client.post("/api/leaves/apply", json=body).status_code == 400


def test_management_all_leaves_shows_names_and_approvals(client):
    leave_id = _apply(client).get_json()["leaveId"]
    client.put(f"/api/leaves/hod/{leave_id}", json={"decision": "Approved", "comment": "fine", "hodEmployeeId": "H-PHY"})

    body = client.get("/api/leaves/management/all-leaves").get_json()

    assert body["success"] is True
    (leave,) = body["leaves"]
    assert leave["employeeName"] == "Ravi Kumar"
    assert leave["approvals"] == [
        {
            "role": "HOD",
            "approverId": "H-PHY",
            "decision": "Approved",
            "comment": "fine",
            "decidedAt": "2024-06-01T09:30:00",
        }
    ]

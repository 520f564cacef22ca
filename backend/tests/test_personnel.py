"""
Personnel, timesheet, contractor and project tests.
"""

from decimal import Decimal

import pytest

from puantaj.services.personnel_service import compute_hours
from puantaj.validation import ValidationError


@pytest.fixture
def person(client, headers):
    resp = client.post(
        "/api/personnel",
        json={"name": "Ali Kaya", "position": "Kalfa", "start_date": "2025-03-01", "salary": "30000"},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json


def _timesheet(client, headers, personnel_id, **fields):
    body = {"personnel_id": personnel_id, "date": "2026-10-12", "start_time": "09:00", "end_time": "17:30"}
    body.update(fields)
    return client.post("/api/timesheets", json=body, headers=headers)


# =============================================================================
# HOURS
# =============================================================================


@pytest.mark.parametrize(
    "start,end,hours",
    [
        ("09:00", "17:30", "8.50"),
        ("22:00", "06:00", "8.00"),
        ("08:15", "08:15", "0.00"),
        ("07:00", "07:20", "0.33"),
    ],
)
def test_compute_hours(start, end, hours):
    assert compute_hours(start, end) == Decimal(hours)


@pytest.mark.parametrize("bad", ["9:00", "24:00", "12:60", "", None, "noon"])
def test_compute_hours_rejects_bad_times(bad):
    with pytest.raises(ValidationError):
        compute_hours(bad, "10:00")


# =============================================================================
# PERSONNEL & TIMESHEETS
# =============================================================================


class TestPersonnel:
    def test_timesheet_hours_computed(self, client, headers, person):
        resp = _timesheet(client, headers, person["id"])
        assert resp.status_code == 201
        assert resp.json["total_hours"] == "8.50"

    def test_explicit_hours_kept(self, client, headers, person):
        resp = _timesheet(client, headers, person["id"], total_hours="7.5")
        assert resp.json["total_hours"] == "7.50"

    def test_update_times_recomputes_hours(self, client, headers, person):
        sheet = _timesheet(client, headers, person["id"]).json
        resp = client.put(f"/api/timesheets/{sheet['id']}", json={"end_time": "19:00"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json["total_hours"] == "10.00"

    def test_invalid_time_rejected(self, client, headers, person):
        assert _timesheet(client, headers, person["id"], start_time="9am").status_code == 400

        sheet = _timesheet(client, headers, person["id"]).json
        resp = client.put(f"/api/timesheets/{sheet['id']}", json={"end_time": "25:00"}, headers=headers)
        assert resp.status_code == 400

        fetched = client.get(f"/api/timesheets/personnel/{person['id']}", headers=headers).json
        assert [s["end_time"] for s in fetched] == ["17:30"]

    def test_active_only_filter(self, client, headers, person):
        client.put(f"/api/personnel/{person['id']}", json={"is_active": False}, headers=headers)
        assert client.get("/api/personnel?active_only=true", headers=headers).json == []
        assert len(client.get("/api/personnel", headers=headers).json) == 1

    def test_delete_removes_timesheets(self, client, headers, person):
        _timesheet(client, headers, person["id"])
        assert client.delete(f"/api/personnel/{person['id']}", headers=headers).status_code == 204
        assert client.get("/api/timesheets", headers=headers).json == []

    def test_delete_refused_with_payments(self, client, headers, person):
        client.post(
            "/api/personnel-payments",
            json={"personnel_id": person["id"], "amount": "100", "description": "Avans",
                  "payment_date": "2026-10-01", "payment_type": "advance"},
            headers=headers,
        )
        assert client.delete(f"/api/personnel/{person['id']}", headers=headers).status_code == 409

    def test_other_user_cannot_log_time(self, client, other_headers, person):
        assert _timesheet(client, other_headers, person["id"]).status_code == 404


# =============================================================================
# CONTRACTORS & PROJECTS
# =============================================================================


class TestContractorsAndProjects:
    def test_contractor_crud(self, client, headers):
        created = client.post(
            "/api/contractors", json={"name": "Usta Yapı", "total_amount": "12000"}, headers=headers
        ).json
        assert created["status"] == "active"
        assert created["total_amount"] == "12000.00"

        resp = client.put(f"/api/contractors/{created['id']}", json={"status": "completed"}, headers=headers)
        assert resp.json["status"] == "completed"
        assert len(client.get("/api/contractors?status=completed", headers=headers).json) == 1

        assert client.delete(f"/api/contractors/{created['id']}", headers=headers).status_code == 204

    def test_project_filters(self, client, headers):
        for name, kind in [("Okul", "given"), ("Villa", "received")]:
            resp = client.post(
                "/api/projects",
                json={"name": name, "type": kind, "amount": "1000", "start_date": "2026-02-01"},
                headers=headers,
            )
            assert resp.status_code == 201
            assert resp.json["status"] == "active"

        given = client.get("/api/projects?type=given", headers=headers).json
        assert [p["name"] for p in given] == ["Okul"]

    def test_project_type_validated(self, client, headers):
        resp = client.post(
            "/api/projects",
            json={"name": "x", "type": "internal", "amount": "1", "start_date": "2026-02-01"},
            headers=headers,
        )
        assert resp.status_code == 400

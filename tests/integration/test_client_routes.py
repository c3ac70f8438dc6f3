"""Integration tests for client dashboard routes."""

from datetime import date, datetime, timedelta

import pytest

from dal.models import DoseRecords, PharmacyAds
from lib.time_utils import parse_timestamp


def _dose(dose_id, medication_id, scheduled, status):
    return {"id": dose_id, "medication_id": medication_id,
            "scheduled_time": scheduled.isoformat(), "status": status}


@pytest.fixture
def remote_data(provider, client_row):
    """Register the client procedures on the fake provider.

    Returns:
        dict: calls received per procedure name
    """
    today = datetime.combine(date.today(), datetime.min.time())
    medications = [{"id": "med-1", "name": "Losartana", "dosage": "50mg"}]
    doses = [
        _dose("d1", "med-1", today + timedelta(hours=8), "taken"),
        _dose("d2", "med-1", today + timedelta(hours=20), "pending"),
        _dose("d3", "med-1", today - timedelta(hours=4), "missed"),
    ]
    calls = {}

    def record(name, result):
        def handler(params):
            calls.setdefault(name, []).append(params)
            return result
        return handler

    provider.rpc_handlers.update({
        "update_missed_doses_for_client": record("update_missed_doses_for_client", None),
        "get_client_medications": record("get_client_medications", medications),
        "get_client_dose_records": record("get_client_dose_records", doses),
        "update_client_dose_status": record("update_client_dose_status", {"ok": True}),
        "delete_client_medication": record("delete_client_medication", True),
    })
    return calls


def test_pharmacy_session_cannot_use_client_routes(api_client, pharmacy_headers):
    assert api_client.get("/api/client/monitoring", headers=pharmacy_headers).status_code == 403


def test_monitoring_preferences(api_client, client_headers):
    initial = api_client.get("/api/client/monitoring", headers=client_headers).json()
    updated = api_client.put("/api/client/monitoring", headers=client_headers,
                             json={"monitor_glucose": True}).json()

    assert initial == {"monitor_bp": False, "monitor_glucose": False}
    assert updated == {"monitor_bp": False, "monitor_glucose": True}


def test_dashboard(api_client, client_headers, client_row, remote_data):
    """Test missed doses are refreshed before today's doses are read."""
    # When
    response = api_client.get("/api/client/dashboard", headers=client_headers)

    # Then
    assert response.status_code == 200
    body = response.json()
    assert remote_data["update_missed_doses_for_client"] == [{"client_id": client_row.id}]
    assert [d["id"] for d in body["today_doses"]] == ["d1", "d2"]
    assert body["adherence"]["adherence"] == 50
    assert body["adherence"]["total"] == 2


def test_dashboard_survives_missed_dose_failure(api_client, provider, client_headers, remote_data):
    del provider.rpc_handlers["update_missed_doses_for_client"]

    response = api_client.get("/api/client/dashboard", headers=client_headers)

    assert response.status_code == 200
    assert len(response.json()["medications"]) == 1


def test_mark_dose(api_client, client_headers, client_row, remote_data):
    response = api_client.put("/api/client/doses/d2/status", headers=client_headers,
                              json={"status": "taken"})

    assert response.status_code == 200
    assert remote_data["update_client_dose_status"] == [
        {"client_id": client_row.id, "dose_id": "d2", "new_status": "taken"}
    ]


def test_mark_dose_rejects_missed(api_client, client_headers, remote_data):
    response = api_client.put("/api/client/doses/d2/status", headers=client_headers,
                              json={"status": "missed"})
    assert response.status_code == 400
    assert "update_client_dose_status" not in remote_data


def test_delete_medication(api_client, provider, client_headers, remote_data):
    assert api_client.delete("/api/client/medications/med-1", headers=client_headers).status_code == 200

    provider.rpc_handlers["delete_client_medication"] = lambda params: False
    assert api_client.delete("/api/client/medications/med-1", headers=client_headers).status_code == 404


def test_add_medication_generates_doses(api_client, client_headers, db_manager):
    """Test one pending dose per schedule per day."""
    response = api_client.post("/api/client/medications", headers=client_headers, json={
        "name": "Vitamina D", "dosage": "1000", "schedules": ["08:00", "20:00"],
        "treatment_duration_days": 3, "start_date": "2024-03-10",
    })

    assert response.status_code == 201
    medication = response.json()["medication"]
    assert medication["dosage"] == "1000mg"
    db_manager.db.expire_all()
    doses = (db_manager.db.query(DoseRecords)
             .filter_by(medication_id=medication["id"])
             .order_by(DoseRecords.scheduled_time)
             .all())
    assert len(doses) == 6
    assert doses[0].scheduled_time == datetime(2024, 3, 10, 8, 0)
    assert doses[-1].scheduled_time == datetime(2024, 3, 12, 20, 0)
    assert {d.status for d in doses} == {"pending"}


def test_add_medication_validation(api_client, client_headers):
    response = api_client.post("/api/client/medications", headers=client_headers, json={
        "name": "", "dosage": "", "schedules": ["25:00"],
    })
    assert response.status_code == 422
    assert set(response.json()["detail"]["errors"]) == {"name", "dosage", "schedules"}


def test_prn_dose(api_client, client_headers, db_manager, pharmacy, client_row):
    medication = db_manager.medications_service.prescribe(
        pharmacy_id=pharmacy.id, client_id=client_row.id, name="Dipirona", dosage="500",
        schedules=[], recurrence_type="custom",
    )

    response = api_client.post(f"/api/client/medications/{medication.id}/prn", headers=client_headers,
                               json={"when": "2024-03-15T14:30:00"})

    assert response.status_code == 201
    dose = response.json()["dose"]
    assert dose["status"] == "taken"
    assert dose["scheduled_time"] == dose["actual_time"]


def test_prn_dose_converts_utc_to_local_time(api_client, client_headers, db_manager, pharmacy, client_row):
    """Test a PRN dose and a vital sign store the same instant for a UTC timestamp."""
    # Given
    medication = db_manager.medications_service.prescribe(
        pharmacy_id=pharmacy.id, client_id=client_row.id, name="Dipirona", dosage="500",
        schedules=[], recurrence_type="custom",
    )
    utc_time = "2024-03-15T14:30:00Z"

    # When
    dose = api_client.post(f"/api/client/medications/{medication.id}/prn", headers=client_headers,
                           json={"when": utc_time}).json()["dose"]
    sign = api_client.post("/api/client/vital-signs", headers=client_headers,
                           json={"measured_at": utc_time, "glucose": 90}).json()["vital_sign"]

    # Then: both are stored as local wall-clock time
    expected = parse_timestamp(utc_time).isoformat()
    assert dose["scheduled_time"] == expected
    assert dose["actual_time"] == expected
    assert sign["measured_at"] == expected


def test_prn_dose_of_another_client(api_client, provider, db_manager, pharmacy, client_row):
    auth_id = provider.create_user("phone_5511977776666@system.local", "secret123")
    other = db_manager.client_service.create_client(
        auth_id=auth_id, pharmacy_id=pharmacy.id, name="José", phone_digits="11977776666")
    medication = db_manager.medications_service.prescribe(
        pharmacy_id=pharmacy.id, client_id=client_row.id, name="Dipirona", dosage="500",
        schedules=[], recurrence_type="custom",
    )

    headers = {"Authorization": f"Bearer {provider.issue_token(other.auth_id)}"}
    response = api_client.post(f"/api/client/medications/{medication.id}/prn", headers=headers, json={})

    assert response.status_code == 403


def test_progress_and_calendar(api_client, client_headers, remote_data):
    today = date.today()

    progress = api_client.get(f"/api/client/progress?period=daily&date={today.isoformat()}",
                              headers=client_headers).json()
    calendar = api_client.get(f"/api/client/calendar?year={today.year}&month={today.month}&day={today.day}",
                              headers=client_headers).json()

    assert progress["stats"]["total"] == 2
    assert progress["medications"][0]["adherence"] == 50
    assert [d["id"] for d in calendar["selected_doses"]] == ["d1", "d2"]
    assert calendar["days"][today.day - 1]["taken"] == 1


def test_calendar_rejects_invalid_day(api_client, client_headers, remote_data):
    response = api_client.get("/api/client/calendar?year=2024&month=2&day=30", headers=client_headers)
    assert response.status_code == 422


def test_vital_signs(api_client, client_headers):
    """Test readings are classified, filtered and deleted."""
    # Given
    api_client.post("/api/client/vital-signs", headers=client_headers,
                    json={"measured_at": datetime.now().isoformat(), "systolic": 135, "diastolic": 85})
    created = api_client.post("/api/client/vital-signs", headers=client_headers,
                              json={"measured_at": datetime.now().isoformat(), "glucose": 90})
    assert created.status_code == 201

    # When
    history = api_client.get("/api/client/vital-signs?filter=bp&range=week", headers=client_headers).json()

    # Then
    [item] = history["items"]
    assert item["bp_status"] == "Hypertension stage 1"
    assert history["averages"]["glucose_count"] == 1

    sign_id = created.json()["vital_sign"]["id"]
    assert api_client.delete(f"/api/client/vital-signs/{sign_id}", headers=client_headers).status_code == 200
    remaining = api_client.get("/api/client/vital-signs", headers=client_headers).json()["items"]
    assert len(remaining) == 1


def test_vital_sign_validation(api_client, client_headers):
    response = api_client.post("/api/client/vital-signs", headers=client_headers,
                               json={"measured_at": datetime.now().isoformat(), "systolic": 120})
    assert response.status_code == 422
    assert "general" in response.json()["detail"]["errors"]


def test_banners_fall_back_to_pharmacy_phone(api_client, client_headers, db_manager, pharmacy):
    db_manager.ads_service.commit(
        PharmacyAds(pharmacy_id=pharmacy.id, image_url="http://x/a.png", is_active=True),
        PharmacyAds(pharmacy_id=pharmacy.id, image_url="http://x/b.png", is_active=False),
    )

    banners = api_client.get("/api/client/banners", headers=client_headers).json()["banners"]

    assert len(banners) == 1
    assert banners[0]["whatsapp_link"].startswith("https://wa.me/5511988887777?text=")


def test_adverse_events_list(api_client, client_headers, db_manager, pharmacy, client_row):
    medication = db_manager.medications_service.prescribe(
        pharmacy_id=pharmacy.id, client_id=client_row.id, name="Losartana", dosage="50",
        schedules=["08:00"],
    )
    dose = db_manager.dose_records_service.add_prn_dose(medication)
    db_manager.events_service.report_issue(dose, "adverse_event", "Dor de cabeça",
                                           event_type="side_effect", severity="mild")

    body = api_client.get("/api/client/adverse-events", headers=client_headers).json()

    assert len(body["adverse_events"]) == 1
    assert body["medications"][medication.id]["name"] == "Losartana"

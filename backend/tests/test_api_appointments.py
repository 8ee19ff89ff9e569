"""Appointment endpoints, including the booking notification."""

from conftest import RecordingNotifier, make_account, make_pet
from vetclinic.services.notifications import get_notification_service
from vetclinic.main import app

APPOINTMENTS = "/api/v1/appointments"


def _booking(pet, vet, **extra):
    return {
        "date": "2025-03-01T10:30:00",
        "description": "Annual checkup",
        "pet_id": str(pet.pet_id),
        "vet_id": str(vet.vet_id),
        **extra,
    }


def _book(client, account, pet, vet, **extra):
    response = client.post(APPOINTMENTS, json=_booking(pet, vet, **extra), headers=account.headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_booking_ignores_client_status_and_notifies(client, db, alice, vet, notifier):
    pet = make_pet(db, alice.owner, "Daisy")

    body = _book(client, alice, pet, vet, status="Completed")

    assert body["status"] == "Scheduled"
    assert body["pet_name"] == "Daisy"
    assert body["vet_name"] == "Gregory House"
    assert body["owner_id"] == str(alice.owner.owner_id)
    assert notifier.sent == [
        (
            "555-0101",
            "telegram/daily_reminder",
            {"petName": "Daisy", "vetName": "House", "date": "2025-03-01 10:30"},
        )
    ]


def test_booking_succeeds_when_notification_fails(client, db, vet):
    carol = make_account(db, "carol", phone_number=None)
    pet = make_pet(db, carol.owner)
    app.dependency_overrides[get_notification_service] = lambda: RecordingNotifier(error=RuntimeError("down"))

    body = _book(client, carol, pet, vet)

    assert body["status"] == "Scheduled"
    assert client.get(f"{APPOINTMENTS}/{body['id']}", headers=carol.headers).status_code == 200


def test_booking_succeeds_when_snapshot_cannot_be_built(client, db, alice, vet, notifier, monkeypatch):
    pet = make_pet(db, alice.owner)

    def broken_snapshot(appointment):
        raise RuntimeError("vet record unavailable")

    monkeypatch.setattr("vetclinic.api.v1.routes.appointments.booking_notification", broken_snapshot)

    body = _book(client, alice, pet, vet)

    assert body["status"] == "Scheduled"
    assert notifier.sent == []


def test_booking_someone_elses_pet(client, db, alice, bob, vet, notifier):
    pet = make_pet(db, bob.owner)

    response = client.post(APPOINTMENTS, json=_booking(pet, vet), headers=alice.headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "You can only book appointments for your own pets."
    assert notifier.sent == []


def test_booking_requires_description(client, db, alice, vet):
    pet = make_pet(db, alice.owner)

    response = client.post(APPOINTMENTS, json=_booking(pet, vet, description=""), headers=alice.headers)

    assert response.status_code == 422


def test_listing_is_scoped_and_paged(client, db, admin, alice, bob, vet):
    daisy = make_pet(db, alice.owner, "Daisy")
    scooby = make_pet(db, bob.owner, "Scooby")
    for day in ("01", "02", "03"):
        _book(client, alice, daisy, vet, date=f"2025-03-{day}T09:00:00")
    _book(client, bob, scooby, vet)

    mine = client.get(APPOINTMENTS, headers=alice.headers).json()
    assert {a["pet_name"] for a in mine} == {"Daisy"}
    assert [a["date"][:10] for a in mine] == ["2025-03-03", "2025-03-02", "2025-03-01"]

    page = client.get(APPOINTMENTS, params={"page": 2, "page_size": 2, "sort_order": "date_asc"}, headers=alice.headers)
    assert [a["date"][:10] for a in page.json()] == ["2025-03-03"]

    everyone = client.get(APPOINTMENTS, params={"filter_date": "2025-03-01"}, headers=admin.headers).json()
    assert {a["pet_name"] for a in everyone} == {"Daisy", "Scooby"}

    assert client.get(APPOINTMENTS, params={"page": 0}, headers=alice.headers).status_code == 422


def test_status_changes(client, db, admin, alice, bob, vet):
    body = _book(client, alice, make_pet(db, alice.owner), vet)
    url = f"{APPOINTMENTS}/{body['id']}/status"

    assert client.put(url, json={"status": "Confirmed"}, headers=alice.headers).status_code == 403
    assert client.put(url, json={"status": "Cancelled"}, headers=bob.headers).status_code == 404
    assert client.put(url, json={"status": "Bogus"}, headers=admin.headers).status_code == 422

    confirmed = client.put(url, json={"status": "Confirmed"}, headers=admin.headers)
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "Confirmed"

    cancelled = client.put(url, json={"status": "Cancelled"}, headers=alice.headers)
    assert cancelled.json()["status"] == "Cancelled"

    reopened = client.put(url, json={"status": "Scheduled"}, headers=admin.headers)
    assert reopened.status_code == 409


def test_diagnosis_is_admin_only(client, db, admin, alice, vet):
    body = _book(client, alice, make_pet(db, alice.owner), vet)
    url = f"{APPOINTMENTS}/{body['id']}/diagnosis"

    assert client.put(url, json={"diagnosis": "Healthy"}, headers=alice.headers).status_code == 403

    response = client.put(url, json={"diagnosis": "Healthy"}, headers=admin.headers)
    assert response.status_code == 200
    assert client.get(f"{APPOINTMENTS}/{body['id']}", headers=alice.headers).json()["diagnosis"] == "Healthy"


def test_treatment_links(client, db, admin, alice, vet, treatment):
    body = _book(client, alice, make_pet(db, alice.owner), vet)
    url = f"{APPOINTMENTS}/{body['id']}/treatments"
    payload = {"treatment_id": str(treatment.treatment_id)}

    assert client.post(url, json=payload, headers=alice.headers).status_code == 201
    duplicate = client.post(url, json=payload, headers=alice.headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "Treatment already added to this appointment."

    detail = client.get(f"{APPOINTMENTS}/{body['id']}", headers=alice.headers).json()
    assert detail["treatments"] == [{"id": str(treatment.treatment_id), "name": "General Checkup", "cost": 50.0}]

    in_use = client.delete(f"/api/v1/treatments/{treatment.treatment_id}", headers=admin.headers)
    assert in_use.status_code == 409

    assert client.delete(f"{url}/{treatment.treatment_id}", headers=alice.headers).status_code == 204
    assert client.delete(f"{url}/{treatment.treatment_id}", headers=alice.headers).status_code == 404
    assert client.delete(f"/api/v1/treatments/{treatment.treatment_id}", headers=admin.headers).status_code == 204


def test_delete_appointment(client, db, alice, bob, vet):
    body = _book(client, alice, make_pet(db, alice.owner), vet)
    url = f"{APPOINTMENTS}/{body['id']}"

    assert client.delete(url, headers=bob.headers).status_code == 404
    assert client.delete(url, headers=alice.headers).status_code == 204
    assert client.get(url, headers=alice.headers).status_code == 404

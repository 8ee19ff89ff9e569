"""Pet endpoints: scoping, creation and reassignment."""

from datetime import datetime

from sqlalchemy import select

from conftest import make_account, make_pet
from vetclinic.db.models.appointment import Appointment
from vetclinic.db.models.pet import Pet

PETS = "/api/v1/pets"


def test_owner_lists_only_their_pets(client, db, alice, bob):
    make_pet(db, alice.owner, "Daisy")
    make_pet(db, bob.owner, "Scooby")

    names = [p["name"] for p in client.get(PETS, headers=alice.headers).json()]
    assert names == ["Daisy"]

    # The owner_id filter does not widen a standard caller's view.
    filtered = client.get(PETS, params={"owner_id": str(bob.owner.owner_id)}, headers=alice.headers)
    assert [p["name"] for p in filtered.json()] == ["Daisy"]


def test_admin_lists_and_filters_all_pets(client, db, admin, alice, bob):
    make_pet(db, alice.owner, "Daisy")
    make_pet(db, bob.owner, "Scooby")

    assert len(client.get(PETS, headers=admin.headers).json()) == 2
    only_bob = client.get(PETS, params={"owner_id": str(bob.owner.owner_id)}, headers=admin.headers).json()
    assert [p["name"] for p in only_bob] == ["Scooby"]

    searched = client.get(PETS, params={"search": "sco"}, headers=admin.headers).json()
    assert [p["name"] for p in searched] == ["Scooby"]


def test_owner_without_profile_sees_empty_list(client, db, alice):
    make_pet(db, alice.owner, "Daisy")
    ghost = make_account(db, "ghost", with_owner=False)

    response = client.get(PETS, headers=ghost.headers)

    assert response.status_code == 200
    assert response.json() == []


def test_foreign_pet_is_not_found(client, db, alice, bob):
    pet = make_pet(db, bob.owner, "Scooby")

    assert client.get(f"{PETS}/{pet.pet_id}", headers=alice.headers).status_code == 404
    assert client.delete(f"{PETS}/{pet.pet_id}", headers=alice.headers).status_code == 404
    assert client.get(f"{PETS}/{pet.pet_id}", headers=bob.headers).status_code == 200


def test_invalid_pet_id_is_bad_request(client, alice):
    response = client.get(f"{PETS}/not-a-uuid", headers=alice.headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid pet_id (must be UUID)"


def test_create_pet_for_self_and_not_for_others(client, alice, bob):
    payload = {"name": "Daisy", "species": "Cat", "age": 1, "owner_id": str(alice.owner.owner_id)}

    created = client.post(PETS, json=payload, headers=alice.headers)
    assert created.status_code == 201
    assert created.json()["owner_name"] == "Alice Tester"

    rejected = client.post(PETS, json={**payload, "owner_id": str(bob.owner.owner_id)}, headers=alice.headers)
    assert rejected.status_code == 400
    assert rejected.json()["detail"] == "You can only create pets for yourself."


def test_admin_create_for_missing_owner(client, admin):
    payload = {"name": "Daisy", "species": "Cat", "age": 1, "owner_id": "00000000-0000-0000-0000-000000000001"}

    response = client.post(PETS, json=payload, headers=admin.headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Owner not found."


def test_only_admin_reassigns_pets(client, db, admin, alice, bob):
    pet = make_pet(db, alice.owner, "Daisy")
    url = f"{PETS}/{pet.pet_id}"
    payload = {"name": "Daisy", "species": "Cat", "age": 2, "owner_id": str(bob.owner.owner_id)}

    assert client.put(url, json=payload, headers=alice.headers).status_code == 400

    moved = client.put(url, json=payload, headers=admin.headers)
    assert moved.status_code == 200
    assert moved.json()["owner_id"] == str(bob.owner.owner_id)
    assert moved.json()["owner_name"] == "Bob Tester"

    assert client.get(url, headers=alice.headers).status_code == 404
    assert client.get(url, headers=bob.headers).json()["age"] == 2


def test_owner_updates_own_pet(client, db, alice):
    pet = make_pet(db, alice.owner, "Daisy")
    payload = {"name": "Daisy Mae", "species": "Cat", "age": 4, "owner_id": str(alice.owner.owner_id)}

    response = client.put(f"{PETS}/{pet.pet_id}", json=payload, headers=alice.headers)

    assert response.status_code == 200
    assert response.json()["name"] == "Daisy Mae"


def test_age_out_of_range_is_rejected(client, alice):
    payload = {"name": "Old", "species": "Tortoise", "age": 99, "owner_id": str(alice.owner.owner_id)}

    assert client.post(PETS, json=payload, headers=alice.headers).status_code == 422


def test_deleting_a_pet_removes_its_appointments(client, db, alice, vet):
    pet = make_pet(db, alice.owner, "Daisy")
    appt = Appointment(pet_id=pet.pet_id, vet_id=vet.vet_id, scheduled_at=datetime(2025, 1, 1), description="x")
    db.add(appt)
    db.commit()

    pet_id, appointment_id = pet.pet_id, appt.appointment_id

    assert client.delete(f"{PETS}/{pet_id}", headers=alice.headers).status_code == 204

    db.expunge_all()
    assert db.execute(select(Pet).where(Pet.pet_id == pet_id)).scalar_one_or_none() is None
    assert db.execute(select(Appointment).where(Appointment.appointment_id == appointment_id)).scalar_one_or_none() is None


def test_pet_appointment_history(client, db, alice, bob, vet):
    pet = make_pet(db, alice.owner, "Daisy")
    for day in (1, 5):
        db.add(Appointment(pet_id=pet.pet_id, vet_id=vet.vet_id, scheduled_at=datetime(2025, 1, day), description="x"))
    db.commit()

    history = client.get(f"{PETS}/{pet.pet_id}/appointments", headers=alice.headers)
    assert history.status_code == 200
    assert [a["date"][:10] for a in history.json()] == ["2025-01-05", "2025-01-01"]

    assert client.get(f"{PETS}/{pet.pet_id}/appointments", headers=bob.headers).status_code == 404

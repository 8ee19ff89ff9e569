"""Module: pets."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from vetclinic.api.v1.routes.appointments import appointment_out
from vetclinic.api.v1.routes.deps import get_caller, get_db
from vetclinic.core.access import EntityKind, require_own_owner, require_visible, scope_filter
from vetclinic.core.errors import ReferenceNotFoundError, commit_or_conflict, parse_uuid
from vetclinic.core.identity import Caller
from vetclinic.db.models.owner import Owner
from vetclinic.db.models.pet import Pet
from vetclinic.services import appointments as appointment_service

router = APIRouter()


class PetPayload(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    species: str = Field(min_length=1, max_length=50)
    age: int = Field(default=0, ge=0, le=30)
    owner_id: str


# -------------------------
# Helpers
# -------------------------
def _pet_out(pet: Pet) -> dict:
    return {
        "id": str(pet.pet_id),
        "name": pet.name,
        "species": pet.species,
        "age": pet.age,
        "owner_id": str(pet.owner_id),
        "owner_name": pet.owner.full_name if pet.owner else None,
        "created_at": pet.created_at,
    }


def _load_pet(db: Session, caller: Caller, pet_id: str) -> Pet:
    pid = parse_uuid(pet_id, "pet_id")
    pet = db.execute(
        select(Pet).options(joinedload(Pet.owner)).where(Pet.pet_id == pid)
    ).scalar_one_or_none()
    return require_visible(EntityKind.PET, pet, caller, "Pet")


# -------------------------
# Endpoints
# -------------------------
@router.get("", summary="List pets visible to the caller")
def list_pets(
    owner_id: str | None = Query(default=None),
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    # owner_id is an administrator filter; standard callers always see only their own pets.
    oid = parse_uuid(owner_id, "owner_id") if owner_id and caller.is_administrator else None

    stmt = (
        select(Pet)
        .options(joinedload(Pet.owner))
        .where(scope_filter(EntityKind.PET, caller, oid))
        .order_by(Pet.name)
    )
    if search:
        stmt = stmt.where(func.lower(Pet.name).contains(search.strip().lower()))

    return [_pet_out(p) for p in db.execute(stmt).scalars().all()]


@router.get("/{pet_id}", summary="Get pet detail")
def get_pet(pet_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return _pet_out(_load_pet(db, caller, pet_id))


@router.post("", status_code=201, summary="Create pet for an owner")
def create_pet(payload: PetPayload, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    oid = parse_uuid(payload.owner_id, "owner_id")
    require_own_owner(caller, oid, "You can only create pets for yourself.")

    if db.get(Owner, oid) is None:
        raise ReferenceNotFoundError("Owner not found.")

    pet = Pet(
        owner_id=oid,
        name=payload.name.strip(),
        species=payload.species.strip(),
        age=payload.age,
    )
    db.add(pet)
    commit_or_conflict(db, "Pet could not be saved.")
    return _pet_out(_load_pet(db, caller, str(pet.pet_id)))


@router.put("/{pet_id}", summary="Update pet details")
def update_pet(
    pet_id: str,
    payload: PetPayload,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    pet = _load_pet(db, caller, pet_id)

    pet.name = payload.name.strip()
    pet.species = payload.species.strip()
    pet.age = payload.age

    # Reassigning a pet to another owner is an administrator action; owners cannot move pets.
    new_owner_id = parse_uuid(payload.owner_id, "owner_id")
    if new_owner_id != pet.owner_id:
        require_own_owner(caller, new_owner_id, "You can only keep pets under your own profile.")
        if db.get(Owner, new_owner_id) is None:
            raise ReferenceNotFoundError("Owner not found.")
        pet.owner_id = new_owner_id

    commit_or_conflict(db, "Pet could not be updated.")
    db.expire(pet, ["owner"])
    return _pet_out(pet)


@router.delete("/{pet_id}", status_code=204, summary="Delete pet")
def delete_pet(pet_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    pet = _load_pet(db, caller, pet_id)
    db.delete(pet)
    commit_or_conflict(db, "Pet could not be deleted.")


@router.get("/{pet_id}/appointments", summary="Appointment history for a pet")
def list_pet_appointments(pet_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return [appointment_out(a) for a in appointment_service.list_pet_appointments(db, caller, pet_id)]

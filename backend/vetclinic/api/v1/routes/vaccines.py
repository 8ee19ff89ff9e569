"""Module: vaccines."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, model_validator
from sqlalchemy import desc, select
from sqlalchemy.orm import Session, joinedload

from vetclinic.api.v1.routes.deps import get_caller, get_db
from vetclinic.core.access import EntityKind, require_own_owner, require_visible, scope_filter
from vetclinic.core.errors import ReferenceNotFoundError, commit_or_conflict, parse_uuid
from vetclinic.core.identity import Caller
from vetclinic.db.models.pet import Pet
from vetclinic.db.models.vaccine import Vaccine

router = APIRouter()


class VaccinePayload(BaseModel):
    pet_id: str
    name: str = Field(min_length=1, max_length=100)
    date_administered: datetime
    expiry_date: datetime | None = None

    @model_validator(mode="after")
    def check_expiry(self):
        if self.expiry_date is not None and self.expiry_date < self.date_administered:
            raise ValueError("expiry_date must not precede date_administered")
        return self


def _vaccine_out(vaccine: Vaccine) -> dict:
    return {
        "id": str(vaccine.vaccine_id),
        "pet_id": str(vaccine.pet_id),
        "pet_name": vaccine.pet.name if vaccine.pet else None,
        "name": vaccine.name,
        "date_administered": vaccine.date_administered,
        "expiry_date": vaccine.expiry_date,
    }


def _load_vaccine(db: Session, caller: Caller, vaccine_id: str) -> Vaccine:
    vid = parse_uuid(vaccine_id, "vaccine_id")
    vaccine = db.execute(
        select(Vaccine).options(joinedload(Vaccine.pet)).where(Vaccine.vaccine_id == vid)
    ).scalar_one_or_none()
    return require_visible(EntityKind.VACCINE, vaccine, caller, "Vaccine")


@router.get("", summary="List vaccines visible to the caller")
def list_vaccines(
    pet_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    stmt = (
        select(Vaccine)
        .options(joinedload(Vaccine.pet))
        .where(scope_filter(EntityKind.VACCINE, caller))
        .order_by(desc(Vaccine.date_administered))
    )
    if pet_id:
        stmt = stmt.where(Vaccine.pet_id == parse_uuid(pet_id, "pet_id"))
    return [_vaccine_out(v) for v in db.execute(stmt).scalars().all()]


@router.get("/{vaccine_id}", summary="Get vaccine record")
def get_vaccine(vaccine_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return _vaccine_out(_load_vaccine(db, caller, vaccine_id))


@router.post("", status_code=201, summary="Record a vaccine for a pet")
def create_vaccine(payload: VaccinePayload, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    pid = parse_uuid(payload.pet_id, "pet_id")
    pet = db.get(Pet, pid)
    require_own_owner(
        caller,
        pet.owner_id if pet is not None else None,
        "You can only add vaccines for your own pets.",
    )
    if pet is None:
        raise ReferenceNotFoundError("Pet not found.")

    vaccine = Vaccine(
        pet_id=pid,
        name=payload.name.strip(),
        date_administered=payload.date_administered,
        expiry_date=payload.expiry_date,
    )
    db.add(vaccine)
    commit_or_conflict(db, "Vaccine could not be saved.")
    return _vaccine_out(_load_vaccine(db, caller, str(vaccine.vaccine_id)))


@router.delete("/{vaccine_id}", status_code=204, summary="Delete vaccine record")
def delete_vaccine(vaccine_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    vaccine = _load_vaccine(db, caller, vaccine_id)
    db.delete(vaccine)
    commit_or_conflict(db, "Vaccine could not be deleted.")

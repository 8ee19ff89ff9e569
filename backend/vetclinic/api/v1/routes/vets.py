"""Module: vets."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from vetclinic.api.v1.routes.deps import get_db, require_admin
from vetclinic.core.errors import NotFoundError, commit_or_conflict, parse_uuid
from vetclinic.core.identity import Caller
from vetclinic.db.models.vet import Vet
from vetclinic.services.reviews import average_rating

router = APIRouter()


class VetPayload(BaseModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    years_of_experience: int = Field(default=0, ge=0, le=70)


def _vet_out(db: Session, vet: Vet) -> dict:
    return {
        "id": str(vet.vet_id),
        "first_name": vet.first_name,
        "last_name": vet.last_name,
        "full_name": vet.full_name,
        "years_of_experience": vet.years_of_experience,
        "average_rating": average_rating(db, vet.vet_id),
    }


def _get_vet(db: Session, vet_id: str) -> Vet:
    vet = db.get(Vet, parse_uuid(vet_id, "vet_id"))
    if not vet:
        raise NotFoundError("Vet not found")
    return vet


# Catalog reads are public.
@router.get("", summary="List vets with their average rating")
def list_vets(db: Session = Depends(get_db)):
    vets = db.execute(select(Vet).order_by(Vet.last_name, Vet.first_name)).scalars().all()
    return [_vet_out(db, v) for v in vets]


@router.get("/{vet_id}", summary="Get vet detail")
def get_vet(vet_id: str, db: Session = Depends(get_db)):
    return _vet_out(db, _get_vet(db, vet_id))


@router.post("", status_code=201, summary="Create vet (administrator)")
def create_vet(payload: VetPayload, db: Session = Depends(get_db), caller: Caller = Depends(require_admin)):
    vet = Vet(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        years_of_experience=payload.years_of_experience,
    )
    db.add(vet)
    commit_or_conflict(db, "Vet could not be saved.")
    return _vet_out(db, vet)


@router.put("/{vet_id}", summary="Update vet (administrator)")
def update_vet(
    vet_id: str,
    payload: VetPayload,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_admin),
):
    vet = _get_vet(db, vet_id)
    vet.first_name = payload.first_name.strip()
    vet.last_name = payload.last_name.strip()
    vet.years_of_experience = payload.years_of_experience
    commit_or_conflict(db, "Vet could not be updated.")
    return _vet_out(db, vet)


@router.delete("/{vet_id}", status_code=204, summary="Delete vet (administrator)")
def delete_vet(vet_id: str, db: Session = Depends(get_db), caller: Caller = Depends(require_admin)):
    vet = _get_vet(db, vet_id)
    db.delete(vet)
    commit_or_conflict(db, "Vet could not be deleted.")

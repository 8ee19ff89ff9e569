"""Module: treatments."""

from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from vetclinic.api.v1.routes.deps import get_db, require_admin
from vetclinic.core.errors import NotFoundError, commit_or_conflict, parse_uuid
from vetclinic.core.identity import Caller
from vetclinic.db.models.treatment import Treatment
from vetclinic.services import appointments as appointment_service

router = APIRouter()


class TreatmentPayload(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    cost: Decimal = Field(ge=0, max_digits=10, decimal_places=2)


def _treatment_out(treatment: Treatment) -> dict:
    return {
        "id": str(treatment.treatment_id),
        "name": treatment.name,
        "cost": float(treatment.cost),
    }


def _get_treatment(db: Session, treatment_id: str) -> Treatment:
    treatment = db.get(Treatment, parse_uuid(treatment_id, "treatment_id"))
    if not treatment:
        raise NotFoundError("Treatment not found")
    return treatment


@router.get("", summary="List treatment catalog")
def list_treatments(db: Session = Depends(get_db)):
    return [_treatment_out(t) for t in db.execute(select(Treatment).order_by(Treatment.name)).scalars().all()]


@router.get("/{treatment_id}", summary="Get treatment")
def get_treatment(treatment_id: str, db: Session = Depends(get_db)):
    return _treatment_out(_get_treatment(db, treatment_id))


@router.post("", status_code=201, summary="Create treatment (administrator)")
def create_treatment(
    payload: TreatmentPayload,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_admin),
):
    treatment = Treatment(name=payload.name.strip(), cost=payload.cost)
    db.add(treatment)
    commit_or_conflict(db, "Treatment could not be saved.")
    return _treatment_out(treatment)


@router.put("/{treatment_id}", summary="Update treatment (administrator)")
def update_treatment(
    treatment_id: str,
    payload: TreatmentPayload,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_admin),
):
    treatment = _get_treatment(db, treatment_id)
    treatment.name = payload.name.strip()
    treatment.cost = payload.cost
    commit_or_conflict(db, "Treatment could not be updated.")
    return _treatment_out(treatment)


# Refused with 409 while any appointment still lists the treatment.
@router.delete("/{treatment_id}", status_code=204, summary="Delete treatment (administrator)")
def delete_treatment(treatment_id: str, db: Session = Depends(get_db), caller: Caller = Depends(require_admin)):
    appointment_service.delete_treatment(db, treatment_id)

"""Module: owners."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from vetclinic.api.v1.routes.deps import get_caller, get_db, require_admin
from vetclinic.core.errors import NotFoundError, commit_or_conflict, parse_uuid
from vetclinic.core.identity import Caller
from vetclinic.db.models.owner import Owner

router = APIRouter()


class OwnerPayload(BaseModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: str = Field(min_length=3, max_length=254)
    phone_number: str | None = None


def _owner_out(owner: Owner) -> dict:
    return {
        "id": str(owner.owner_id),
        "first_name": owner.first_name,
        "last_name": owner.last_name,
        "full_name": owner.full_name,
        "email": owner.email,
        "phone_number": owner.phone_number,
        "user_id": str(owner.user_id) if owner.user_id else None,
    }


# Owners are visible to themselves and administrators only; anyone else gets 404.
def _visible_owner(db: Session, caller: Caller, owner_id: str) -> Owner:
    oid = parse_uuid(owner_id, "owner_id")
    owner = db.get(Owner, oid)
    if not owner or not (caller.is_administrator or caller.owner_id == oid):
        raise NotFoundError("Owner not found")
    return owner


def _apply(owner: Owner, payload: OwnerPayload) -> None:
    owner.first_name = payload.first_name.strip()
    owner.last_name = payload.last_name.strip()
    owner.email = payload.email.strip().lower()
    owner.phone_number = (payload.phone_number or "").strip() or None


# Endpoint: handles HTTP request/response mapping for this route.
@router.get("", summary="List owners (administrator)")
def list_owners(
    limit: int = 200,
    offset: int = 0,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_admin),
):
    owners = db.execute(
        select(Owner).order_by(Owner.last_name, Owner.first_name).offset(offset).limit(limit)
    ).scalars().all()
    return [_owner_out(o) for o in owners]


@router.get("/{owner_id}", summary="Get owner detail")
def get_owner(owner_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return _owner_out(_visible_owner(db, caller, owner_id))


@router.post("", status_code=201, summary="Create owner without a login (administrator)")
def create_owner(
    payload: OwnerPayload,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_admin),
):
    owner = Owner()
    _apply(owner, payload)
    db.add(owner)
    commit_or_conflict(db, "An owner with this email already exists.")
    return _owner_out(owner)


@router.put("/{owner_id}", summary="Update owner profile")
def update_owner(
    owner_id: str,
    payload: OwnerPayload,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    owner = _visible_owner(db, caller, owner_id)
    _apply(owner, payload)
    commit_or_conflict(db, "An owner with this email already exists.")
    return _owner_out(owner)


@router.delete("/{owner_id}", status_code=204, summary="Delete owner and their pets (administrator)")
def delete_owner(
    owner_id: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_admin),
):
    owner = _visible_owner(db, caller, owner_id)
    db.delete(owner)
    commit_or_conflict(db, "Owner could not be deleted.")

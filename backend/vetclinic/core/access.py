"""Ownership-scoped access rules.

Two independent pieces:

* ``scope_filter`` turns a caller into a SQL predicate for collection reads.
  Standard callers are silently narrowed to their own records.
* ``authorize_mutation`` decides whether a caller may read or change one
  loaded record. Failing it is reported as "not found", never as
  "forbidden", so callers cannot discover other owners' records.

Appointments and vaccines have no owner column of their own; both are
owned through their pet.
"""

from __future__ import annotations

import enum
import uuid
from typing import Callable

from sqlalchemy import ColumnElement, false, true

from vetclinic.core.errors import NotFoundError, OwnershipRejectedError
from vetclinic.core.identity import Caller
from vetclinic.db.models.appointment import Appointment
from vetclinic.db.models.pet import Pet
from vetclinic.db.models.vaccine import Vaccine


class EntityKind(enum.Enum):
    PET = "pet"
    APPOINTMENT = "appointment"
    VACCINE = "vaccine"


# Owner predicate per kind, expressed along the join path to Pet.owner_id.
_OWNER_PREDICATES: dict[EntityKind, Callable[[uuid.UUID], ColumnElement[bool]]] = {
    EntityKind.PET: lambda owner_id: Pet.owner_id == owner_id,
    EntityKind.APPOINTMENT: lambda owner_id: Appointment.pet.has(Pet.owner_id == owner_id),
    EntityKind.VACCINE: lambda owner_id: Vaccine.pet.has(Pet.owner_id == owner_id),
}


def scope_filter(
    kind: EntityKind,
    caller: Caller,
    owner_id: uuid.UUID | None = None,
) -> ColumnElement[bool]:
    """Predicate narrowing a collection query to what the caller may see.

    ``owner_id`` is an explicit filter only administrators may apply;
    for standard callers their own owner id always wins.
    """
    owner_predicate = _OWNER_PREDICATES[kind]

    if caller.is_administrator:
        return owner_predicate(owner_id) if owner_id is not None else true()

    if caller.owner_id is None:
        return false()

    return owner_predicate(caller.owner_id)


def transitive_owner_id(kind: EntityKind, record) -> uuid.UUID | None:
    if kind is EntityKind.PET:
        return record.owner_id
    pet = record.pet
    return pet.owner_id if pet is not None else None


def authorize_mutation(kind: EntityKind, record, caller: Caller) -> bool:
    if caller.is_administrator:
        return True
    if caller.owner_id is None:
        return False
    return transitive_owner_id(kind, record) == caller.owner_id


def require_visible(kind: EntityKind, record, caller: Caller, label: str):
    """Return ``record`` if the caller may access it, else raise NotFoundError."""
    if record is None or not authorize_mutation(kind, record, caller):
        raise NotFoundError(f"{label} not found")
    return record


def require_own_owner(caller: Caller, owner_id: uuid.UUID | None, message: str) -> None:
    """Creation-side check: standard callers may only act for their own owner profile."""
    if caller.is_administrator:
        return
    if caller.owner_id is None or owner_id != caller.owner_id:
        raise OwnershipRejectedError(message)

"""Appointment lifecycle: booking, status changes and treatment links."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time, timedelta

from sqlalchemy import asc, case, desc, func, select
from sqlalchemy.orm import Session, joinedload

from vetclinic.core.access import EntityKind, require_own_owner, require_visible, scope_filter
from vetclinic.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ReferenceNotFoundError,
    commit_or_conflict,
    parse_uuid,
)
from vetclinic.core.identity import Caller
from vetclinic.db.models.appointment import Appointment, AppointmentStatus
from vetclinic.db.models.appointment_treatment import AppointmentTreatment
from vetclinic.db.models.pet import Pet
from vetclinic.db.models.treatment import Treatment
from vetclinic.db.models.vet import Vet

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
    AppointmentStatus.NO_SHOW,
})

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}

# Statuses a standard caller may set on their own appointment.
OWNER_SETTABLE_STATUSES = frozenset({AppointmentStatus.CANCELLED})

# Lifecycle position of each status, in declaration order.
STATUS_RANK = case(
    {status.value: rank for rank, status in enumerate(AppointmentStatus)},
    value=Appointment.status,
    else_=len(AppointmentStatus),
)

SORT_ORDERS = {
    "date_desc": (desc(Appointment.scheduled_at),),
    "date_asc": (asc(Appointment.scheduled_at),),
    "status": (asc(STATUS_RANK), desc(Appointment.scheduled_at)),
}

DUPLICATE_TREATMENT = "Treatment already added to this appointment."
TREATMENT_IN_USE = "Cannot delete treatment; it is attached to existing appointments."


def _appointment_query():
    # Pet, owner, vet and treatments in one round trip.
    return select(Appointment).options(
        joinedload(Appointment.pet).joinedload(Pet.owner),
        joinedload(Appointment.vet),
        joinedload(Appointment.treatment_links).joinedload(AppointmentTreatment.treatment),
    )


def load_appointment(db: Session, appointment_id: uuid.UUID) -> Appointment | None:
    stmt = (
        _appointment_query()
        .where(Appointment.appointment_id == appointment_id)
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).unique().scalar_one_or_none()


def _visible_appointment(db: Session, caller: Caller, appointment_id: str | uuid.UUID) -> Appointment:
    aid = parse_uuid(appointment_id, "appointment_id")
    return require_visible(EntityKind.APPOINTMENT, load_appointment(db, aid), caller, "Appointment")


# -------------------------
# Reads
# -------------------------
def list_appointments(
    db: Session,
    caller: Caller,
    *,
    page: int = 1,
    page_size: int = 10,
    sort_order: str | None = "date_desc",
    filter_date: date | None = None,
) -> list[Appointment]:
    stmt = _appointment_query().where(scope_filter(EntityKind.APPOINTMENT, caller))

    if filter_date:
        day_start = datetime.combine(filter_date, time.min)
        stmt = stmt.where(
            Appointment.scheduled_at >= day_start,
            Appointment.scheduled_at < day_start + timedelta(days=1),
        )

    ordering = SORT_ORDERS.get((sort_order or "date_desc").lower(), SORT_ORDERS["date_desc"])
    stmt = stmt.order_by(*ordering).offset((max(page, 1) - 1) * page_size).limit(page_size)

    return list(db.execute(stmt).unique().scalars().all())


def get_appointment(db: Session, caller: Caller, appointment_id: str) -> Appointment:
    return _visible_appointment(db, caller, appointment_id)


def list_pet_appointments(db: Session, caller: Caller, pet_id: str) -> list[Appointment]:
    """Visit history for one pet, newest first."""
    pid = parse_uuid(pet_id, "pet_id")
    require_visible(EntityKind.PET, db.get(Pet, pid), caller, "Pet")

    stmt = (
        _appointment_query()
        .where(Appointment.pet_id == pid)
        .order_by(desc(Appointment.scheduled_at))
    )
    return list(db.execute(stmt).unique().scalars().all())


# -------------------------
# Writes
# -------------------------
def create_appointment(
    db: Session,
    caller: Caller,
    *,
    pet_id: str,
    vet_id: str,
    scheduled_at: datetime,
    description: str,
) -> Appointment:
    """Book an appointment. Status always starts as Scheduled."""
    pid = parse_uuid(pet_id, "pet_id")
    vid = parse_uuid(vet_id, "vet_id")

    pet = db.get(Pet, pid)
    require_own_owner(
        caller,
        pet.owner_id if pet is not None else None,
        "You can only book appointments for your own pets.",
    )
    if pet is None:
        raise ReferenceNotFoundError("Pet not found.")

    if db.get(Vet, vid) is None:
        raise ReferenceNotFoundError("Vet not found.")

    appointment = Appointment(
        pet_id=pid,
        vet_id=vid,
        scheduled_at=scheduled_at,
        description=(description or "").strip(),
        status=AppointmentStatus.SCHEDULED.value,
    )
    db.add(appointment)
    commit_or_conflict(db, "Appointment could not be saved.")

    logger.info("Appointment %s booked for pet %s with vet %s", appointment.appointment_id, pid, vid)
    return load_appointment(db, appointment.appointment_id)


def update_status(
    db: Session,
    caller: Caller,
    appointment_id: str,
    new_status: AppointmentStatus,
) -> Appointment:
    appointment = _visible_appointment(db, caller, appointment_id)

    if not caller.is_administrator and new_status not in OWNER_SETTABLE_STATUSES:
        raise PermissionDeniedError(f"Only administrators can set status {new_status.value}.")

    current = AppointmentStatus(appointment.status)
    if new_status == current:
        return appointment

    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise ConflictError(f"Cannot change status from {current.value} to {new_status.value}.")

    appointment.status = new_status.value
    commit_or_conflict(db, "Appointment status could not be updated.")
    logger.info("Appointment %s moved %s -> %s", appointment.appointment_id, current.value, new_status.value)
    return appointment


def record_diagnosis(db: Session, caller: Caller, appointment_id: str, diagnosis: str | None) -> Appointment:
    appointment = _visible_appointment(db, caller, appointment_id)
    appointment.diagnosis = (diagnosis or "").strip() or None
    commit_or_conflict(db, "Diagnosis could not be saved.")
    return appointment


def delete_appointment(db: Session, caller: Caller, appointment_id: str) -> None:
    appointment = _visible_appointment(db, caller, appointment_id)
    db.delete(appointment)
    commit_or_conflict(db, "Appointment could not be deleted.")


# -------------------------
# Treatment links
# -------------------------
def attach_treatment(db: Session, caller: Caller, appointment_id: str, treatment_id: str) -> AppointmentTreatment:
    appointment = _visible_appointment(db, caller, appointment_id)
    tid = parse_uuid(treatment_id, "treatment_id")

    if db.get(Treatment, tid) is None:
        raise ReferenceNotFoundError("Treatment not found.")

    key = (appointment.appointment_id, tid)
    if db.get(AppointmentTreatment, key) is not None:
        raise ConflictError(DUPLICATE_TREATMENT)

    link = AppointmentTreatment(appointment_id=appointment.appointment_id, treatment_id=tid)
    db.add(link)
    # A concurrent attach that won the race surfaces here as a PK violation.
    commit_or_conflict(db, DUPLICATE_TREATMENT)
    return link


def detach_treatment(db: Session, caller: Caller, appointment_id: str, treatment_id: str) -> None:
    appointment = _visible_appointment(db, caller, appointment_id)
    tid = parse_uuid(treatment_id, "treatment_id")

    link = db.get(AppointmentTreatment, (appointment.appointment_id, tid))
    if link is None:
        raise NotFoundError("Treatment not found on this appointment.")

    db.delete(link)
    commit_or_conflict(db, "Treatment could not be removed.")


def delete_treatment(db: Session, treatment_id: str) -> None:
    """Delete a catalog treatment unless an appointment still references it."""
    tid = parse_uuid(treatment_id, "treatment_id")
    treatment = db.get(Treatment, tid)
    if treatment is None:
        raise NotFoundError("Treatment not found")

    in_use = db.execute(
        select(func.count()).select_from(AppointmentTreatment).where(AppointmentTreatment.treatment_id == tid)
    ).scalar_one()
    if in_use:
        logger.warning("Refusing to delete treatment %s: attached to %s appointment(s)", tid, in_use)
        raise ConflictError(TREATMENT_IN_USE)

    db.delete(treatment)
    # FK RESTRICT covers an attach that lands between the check and the delete.
    commit_or_conflict(db, TREATMENT_IN_USE)

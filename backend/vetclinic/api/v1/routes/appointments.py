"""Module: appointments."""

from __future__ import annotations

import logging
from datetime import date, datetime

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from vetclinic.api.v1.routes.deps import get_caller, get_db, require_admin
from vetclinic.core.config import settings
from vetclinic.core.identity import Caller
from vetclinic.db.models.appointment import Appointment, AppointmentStatus
from vetclinic.services import appointments as appointment_service
from vetclinic.services.notifications import (
    NotificationService,
    booking_notification,
    dispatch_booking_notification,
    get_notification_service,
)

router = APIRouter()

logger = logging.getLogger(__name__)


class AppointmentCreatePayload(BaseModel):
    date: datetime
    description: str = Field(min_length=1, max_length=1000)
    pet_id: str
    vet_id: str
    # Accepted for client compatibility but never honoured: bookings start Scheduled.
    status: str | None = None


class StatusPayload(BaseModel):
    status: AppointmentStatus


class DiagnosisPayload(BaseModel):
    diagnosis: str | None = Field(default=None, max_length=2000)


class TreatmentLinkPayload(BaseModel):
    treatment_id: str


def appointment_out(appointment: Appointment) -> dict:
    pet = appointment.pet
    vet = appointment.vet
    return {
        "id": str(appointment.appointment_id),
        "date": appointment.scheduled_at,
        "status": appointment.status,
        "description": appointment.description,
        "diagnosis": appointment.diagnosis,
        "pet_id": str(appointment.pet_id),
        "pet_name": pet.name if pet else None,
        "owner_id": str(pet.owner_id) if pet else None,
        "owner_name": pet.owner.full_name if pet and pet.owner else None,
        "vet_id": str(appointment.vet_id),
        "vet_name": vet.full_name if vet else None,
        "treatments": [
            {
                "id": str(link.treatment.treatment_id),
                "name": link.treatment.name,
                "cost": float(link.treatment.cost),
            }
            for link in appointment.treatment_links
        ],
    }


# Endpoint: handles HTTP request/response mapping for this route.
@router.get("", summary="List appointments visible to the caller")
def list_appointments(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
    sort_order: str | None = Query(default="date_desc"),
    filter_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    appointments = appointment_service.list_appointments(
        db,
        caller,
        page=page,
        page_size=page_size,
        sort_order=sort_order,
        filter_date=filter_date,
    )
    return [appointment_out(a) for a in appointments]


@router.get("/{appointment_id}", summary="Get appointment detail")
def get_appointment(appointment_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return appointment_out(appointment_service.get_appointment(db, caller, appointment_id))


@router.post("", status_code=201, summary="Book an appointment")
def create_appointment(
    payload: AppointmentCreatePayload,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    notifier: NotificationService = Depends(get_notification_service),
):
    appointment = appointment_service.create_appointment(
        db,
        caller,
        pet_id=payload.pet_id,
        vet_id=payload.vet_id,
        scheduled_at=payload.date,
        description=payload.description,
    )

    # Reminder goes out after the response; its outcome never reaches the caller.
    try:
        notification = booking_notification(appointment)
    except Exception:
        logger.exception("Could not build booking notification for appointment %s", appointment.appointment_id)
    else:
        background_tasks.add_task(
            dispatch_booking_notification,
            notifier,
            notification,
            settings.notification_booking_template,
        )
    return appointment_out(appointment)


@router.put("/{appointment_id}/status", summary="Change appointment status")
def update_status(
    appointment_id: str,
    payload: StatusPayload,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    appointment = appointment_service.update_status(db, caller, appointment_id, payload.status)
    return {"id": str(appointment.appointment_id), "status": appointment.status}


@router.put("/{appointment_id}/diagnosis", summary="Record diagnosis (administrator)")
def record_diagnosis(
    appointment_id: str,
    payload: DiagnosisPayload,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_admin),
):
    appointment = appointment_service.record_diagnosis(db, caller, appointment_id, payload.diagnosis)
    return {"id": str(appointment.appointment_id), "diagnosis": appointment.diagnosis}


@router.delete("/{appointment_id}", status_code=204, summary="Delete appointment")
def delete_appointment(appointment_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    appointment_service.delete_appointment(db, caller, appointment_id)


@router.post("/{appointment_id}/treatments", status_code=201, summary="Attach a treatment")
def attach_treatment(
    appointment_id: str,
    payload: TreatmentLinkPayload,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    link = appointment_service.attach_treatment(db, caller, appointment_id, payload.treatment_id)
    return {
        "appointment_id": str(link.appointment_id),
        "treatment_id": str(link.treatment_id),
        "message": "Treatment added.",
    }


@router.delete("/{appointment_id}/treatments/{treatment_id}", status_code=204, summary="Detach a treatment")
def detach_treatment(
    appointment_id: str,
    treatment_id: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    appointment_service.detach_treatment(db, caller, appointment_id, treatment_id)

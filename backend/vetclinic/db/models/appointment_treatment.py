"""Module: appointment_treatment."""

import uuid

from sqlalchemy import ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vetclinic.db.base import Base


# Join row; the composite key is what makes a treatment attachable once per appointment.
class AppointmentTreatment(Base):
    __tablename__ = "appointment_treatments"

    appointment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("appointments.appointment_id", ondelete="CASCADE"),
        primary_key=True
    )
    # RESTRICT: a treatment in use cannot be deleted out from under an appointment.
    treatment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("treatments.treatment_id", ondelete="RESTRICT"),
        primary_key=True
    )

    appointment: Mapped["Appointment"] = relationship(back_populates="treatment_links")
    treatment: Mapped["Treatment"] = relationship()

"""Module: appointment."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vetclinic.db.base import Base


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "NoShow"


# Booked visit of one pet with one vet. There is deliberately no owner
# column: the owner is always Appointment -> Pet -> Owner.
class Appointment(Base):
    __tablename__ = "appointments"

    appointment_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    pet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("pets.pet_id", ondelete="CASCADE"),
        nullable=False
    )
    vet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vets.vet_id", ondelete="CASCADE"),
        nullable=False
    )

    scheduled_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False, default="")
    # Filled after the visit.
    diagnosis: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default=AppointmentStatus.SCHEDULED.value)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    pet: Mapped["Pet"] = relationship(back_populates="appointments")
    vet: Mapped["Vet"] = relationship(back_populates="appointments")
    treatment_links: Mapped[list["AppointmentTreatment"]] = relationship(
        back_populates="appointment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

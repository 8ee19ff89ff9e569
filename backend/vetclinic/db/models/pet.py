"""Module: pet."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vetclinic.db.base import Base


# Core pet profile; appointments and vaccines inherit their owner from here.
class Pet(Base):
    __tablename__ = "pets"

    # Primary Key
    pet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("owners.owner_id", ondelete="CASCADE"),
        nullable=False
    )

    # Basic Info
    name: Mapped[str] = mapped_column(String, nullable=False)
    species: Mapped[str] = mapped_column(String, nullable=False, default="")
    age: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Audit
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow
    )

    owner: Mapped["Owner"] = relationship(back_populates="pets")
    appointments: Mapped[list["Appointment"]] = relationship(
        back_populates="pet",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    vaccines: Mapped[list["Vaccine"]] = relationship(
        back_populates="pet",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

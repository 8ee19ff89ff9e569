"""Module: treatment."""

import uuid
from decimal import Decimal

from sqlalchemy import Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from vetclinic.db.base import Base


# Catalog item attached to appointments through appointment_treatments.
class Treatment(Base):
    __tablename__ = "treatments"

    treatment_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))

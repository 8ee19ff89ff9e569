"""Module: review."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vetclinic.db.base import Base

# Owner-attributed rating of a vet; feeds the vet's average rating.
class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    review_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    vet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vets.vet_id", ondelete="CASCADE"),
        nullable=False
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("owners.owner_id", ondelete="CASCADE"),
        nullable=False
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    # Server-assigned; client-supplied timestamps are ignored.
    posted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    vet: Mapped["Vet"] = relationship(back_populates="reviews")
    owner: Mapped["Owner"] = relationship(back_populates="reviews")

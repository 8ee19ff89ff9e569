"""Vet reviews and rating aggregation."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from sqlalchemy import desc, select
from sqlalchemy.orm import Session, joinedload

from vetclinic.core.access import require_own_owner
from vetclinic.core.errors import ReferenceNotFoundError, commit_or_conflict, parse_uuid
from vetclinic.core.identity import Caller
from vetclinic.db.models.owner import Owner
from vetclinic.db.models.review import Review
from vetclinic.db.models.vet import Vet

logger = logging.getLogger(__name__)


def mean_rating(ratings: Iterable[int]) -> float:
    """Arithmetic mean rounded half-up to one decimal; 0.0 for no ratings."""
    values = list(ratings)
    if not values:
        return 0.0
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def average_rating(db: Session, vet_id: uuid.UUID) -> float:
    ratings = db.execute(select(Review.rating).where(Review.vet_id == vet_id)).scalars().all()
    return mean_rating(ratings)


def list_reviews(db: Session, vet_id: str | None = None) -> list[Review]:
    stmt = select(Review).options(joinedload(Review.owner)).order_by(desc(Review.posted_at))
    if vet_id:
        vid = parse_uuid(vet_id, "vet_id")
        logger.info("Fetching reviews filtered by vet %s", vid)
        stmt = stmt.where(Review.vet_id == vid)
    return list(db.execute(stmt).scalars().all())


def create_review(
    db: Session,
    caller: Caller,
    *,
    vet_id: str,
    owner_id: str,
    rating: int,
    comment: str,
) -> Review:
    vid = parse_uuid(vet_id, "vet_id")
    oid = parse_uuid(owner_id, "owner_id")

    logger.info("Creating review. Vet: %s, Owner: %s", vid, oid)

    if db.get(Vet, vid) is None:
        raise ReferenceNotFoundError("Vet not found")
    require_own_owner(caller, oid, "You can only post reviews as yourself.")
    if db.get(Owner, oid) is None:
        raise ReferenceNotFoundError("Owner not found")

    review = Review(
        vet_id=vid,
        owner_id=oid,
        rating=rating,
        comment=(comment or "").strip(),
        posted_at=datetime.utcnow(),
    )
    db.add(review)
    commit_or_conflict(db, "Review could not be saved.")
    db.refresh(review, attribute_names=["owner"])
    return review

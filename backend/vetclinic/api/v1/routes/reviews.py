"""Module: reviews."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from vetclinic.api.v1.routes.deps import get_caller, get_db
from vetclinic.core.errors import parse_uuid
from vetclinic.core.identity import Caller
from vetclinic.db.models.review import Review
from vetclinic.services import reviews as review_service

router = APIRouter()


class ReviewPayload(BaseModel):
    vet_id: str
    owner_id: str
    rating: int = Field(ge=1, le=5)
    comment: str = Field(default="", max_length=500)


def _review_out(review: Review) -> dict:
    owner = review.owner
    return {
        "id": str(review.review_id),
        "vet_id": str(review.vet_id),
        "owner_id": str(review.owner_id),
        "owner_name": owner.full_name if owner else None,
        "rating": review.rating,
        "comment": review.comment,
        "posted_at": review.posted_at,
    }


@router.get("", summary="List reviews, newest first")
def list_reviews(vet_id: str | None = Query(default=None), db: Session = Depends(get_db)):
    return [_review_out(r) for r in review_service.list_reviews(db, vet_id)]


@router.post("", status_code=201, summary="Post a review of a vet")
def create_review(payload: ReviewPayload, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    review = review_service.create_review(
        db,
        caller,
        vet_id=payload.vet_id,
        owner_id=payload.owner_id,
        rating=payload.rating,
        comment=payload.comment,
    )
    return _review_out(review)


@router.get("/average/{vet_id}", summary="Average rating for a vet")
def get_average_rating(vet_id: str, db: Session = Depends(get_db)):
    vid = parse_uuid(vet_id, "vet_id")
    return {"vet_id": str(vid), "average_rating": review_service.average_rating(db, vid)}

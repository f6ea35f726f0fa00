# app/api/reviews.py

from typing import Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.api.deps import MAX_ID, CallerIdentity, require_access_token, require_review_owner
from app.core.review import (
    create_review,
    delete_review,
    get_review_or_404,
    list_reviews,
    review_view,
    update_review,
)
from app.infra.postgres import get_db
from app.models.review import Review

router = APIRouter(prefix="/reviews")


class CreateReviewSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    rating: int = Field(..., ge=1, le=5)
    product_id: int = Field(..., alias="productId")


class UpdateReviewSchema(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)


@router.post("", status_code=201)
def create_review_endpoint(
    payload: CreateReviewSchema,
    caller: CallerIdentity = Depends(require_access_token),
    db: Session = Depends(get_db),
):
    review = create_review(
        db,
        author_id=caller.user_id,
        product_id=payload.product_id,
        title=payload.title,
        description=payload.description,
        rating=payload.rating,
    )
    return review_view(review)


@router.get("")
def list_reviews_endpoint(db: Session = Depends(get_db)):
    return [review_view(r) for r in list_reviews(db)]


@router.get("/{review_id}")
def get_review_endpoint(review_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)):
    return review_view(get_review_or_404(db, review_id))


@router.put("/{review_id}")
def update_review_endpoint(
    payload: UpdateReviewSchema,
    review: Review = Depends(require_review_owner),
    db: Session = Depends(get_db),
):
    """Update title/description/rating; only the author gets past the gate"""
    return review_view(update_review(db, review, payload.model_dump(exclude_unset=True)))


@router.delete("/{review_id}")
def delete_review_endpoint(review: Review = Depends(require_review_owner), db: Session = Depends(get_db)):
    return delete_review(db, review)

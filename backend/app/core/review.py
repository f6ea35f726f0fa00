# app/core/review.py

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import DB_ERROR_MESSAGE, AuthenticationError, ForbiddenError, NotFoundError, ServerError
from app.core.product import get_product_or_404
from app.models.review import Review

logger = logging.getLogger(__name__)

# Fields a review author may change; author_id and product_id are fixed
MUTABLE_FIELDS = ("title", "description", "rating")


def _commit(db: Session, action: str, review: Optional[Review] = None) -> None:
    """Commit (and reload `review`), hiding database errors behind ServerError."""
    try:
        db.commit()
        if review is not None:
            db.refresh(review)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("%s failed", action)
        raise ServerError(DB_ERROR_MESSAGE)


def review_view(review: Review) -> Dict[str, Any]:
    return {
        "id": review.id,
        "title": review.title,
        "description": review.description,
        "rating": review.rating,
        "productId": review.product_id,
        "authorId": review.author_id,
        "createdAt": review.created_at.isoformat() if review.created_at else None,
        "updatedAt": review.updated_at.isoformat() if review.updated_at else None,
    }


def create_review(
    db: Session,
    author_id: int,
    product_id: int,
    title: str,
    description: str,
    rating: int,
) -> Review:
    get_product_or_404(db, product_id)

    review = Review(
        title=title,
        description=description,
        rating=rating,
        product_id=product_id,
        author_id=author_id,
    )
    db.add(review)
    _commit(db, f"Creating review for product {product_id}", review)
    logger.info("Review %s created by user %s", review.id, author_id)
    return review


def get_review(db: Session, review_id: int) -> Optional[Review]:
    return db.get(Review, review_id)


def get_review_or_404(db: Session, review_id: int) -> Review:
    review = get_review(db, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    return review


def list_reviews(db: Session) -> List[Review]:
    return db.query(Review).order_by(Review.id).all()


def update_review(db: Session, review: Review, changes: Dict[str, Any]) -> Review:
    for field in MUTABLE_FIELDS:
        if changes.get(field) is not None:
            setattr(review, field, changes[field])
    _commit(db, f"Updating review {review.id}", review)
    return review


def delete_review(db: Session, review: Review) -> Dict[str, Any]:
    deleted = review_view(review)
    db.delete(review)
    _commit(db, f"Deleting review {deleted['id']}")
    logger.info("Review %s deleted", deleted["id"])
    return deleted


def authorize_review_mutation(db: Session, review_id: int, caller_user_id: Optional[int]) -> Review:
    """
    Ownership gate run before any review update or delete.

    The review must exist before the caller is considered at all, so an
    unknown id is always a 404. A caller who is not the author gets 403.
    """
    review = get_review_or_404(db, review_id)

    if caller_user_id is None:
        raise AuthenticationError("User not authenticated")

    if review.author_id != caller_user_id:
        logger.warning("User %s may not modify review %s", caller_user_id, review_id)
        raise ForbiddenError("Forbidden")

    return review

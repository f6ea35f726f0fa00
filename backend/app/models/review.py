# app/models/review.py

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from app.models.base import Base
from app.models.user import utcnow


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    rating = Column(Integer, nullable=False)

    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    # Set once at creation
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

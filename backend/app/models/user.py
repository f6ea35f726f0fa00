# app/models/user.py

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from app.models.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)

    # bcrypt hash, never serialized
    password = Column(String(255), nullable=False)

    # The only refresh token currently accepted for this user
    refresh_token = Column(String(512), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<User {self.email}>"

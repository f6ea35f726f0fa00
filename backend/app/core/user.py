# app/core/user.py

import logging
from datetime import datetime, timezone
from typing import Any, Dict, NamedTuple, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import (
    DB_ERROR_MESSAGE,
    AppError,
    AuthenticationError,
    NotFoundError,
    ServerError,
    ValidationError,
)
from app.core.security import create_token, hash_password, verify_password
from app.models.user import User

logger = logging.getLogger(__name__)


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


class LoginResult(NamedTuple):
    user: Dict[str, Any]
    access_token: str
    refresh_token: str


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def public_user_view(user: User) -> Dict[str, Any]:
    """User as exposed to clients: no password, no refresh token."""
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "createdAt": _isoformat(user.created_at),
        "updatedAt": _isoformat(user.updated_at),
    }


# ---------- STORE ACCESS ----------

def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def save_user(db: Session, email: str, name: str, hashed_password: str) -> User:
    user = User(email=email, name=name, password=hashed_password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, **fields) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("Not Found")
    for key, value in fields.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


def rotate_refresh_token(db: Session, user_id: int, expected: str, new_token: str) -> bool:
    """
    Replace the stored refresh token only if it still equals `expected`.
    Returns False when a concurrent rotation already replaced it.
    """
    result = db.execute(
        update(User)
        .where(User.id == user_id, User.refresh_token == expected)
        .values(refresh_token=new_token, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount == 1


# ---------- FLOWS ----------

def register_user(db: Session, email: str, name: str, password: str) -> Dict[str, Any]:
    """Create a user unless the email is taken; returns the public view."""
    try:
        if get_user_by_email(db, email):
            raise ValidationError("User already exists", data={"email": email})

        user = save_user(db, email, name, hash_password(password))
    except AppError:
        raise
    except IntegrityError:
        # Lost a race against a registration for the same email
        db.rollback()
        raise ValidationError("User already exists", data={"email": email})
    except SQLAlchemyError:
        db.rollback()
        logger.exception("User registration failed for %s", email)
        raise ServerError(DB_ERROR_MESSAGE)

    logger.info("✅ User %s registered", user.id)
    return public_user_view(user)


def authenticate_user(db: Session, email: str, password: str) -> User:
    try:
        user = get_user_by_email(db, email)
    except SQLAlchemyError:
        logger.exception("User lookup failed for %s", email)
        raise ServerError(DB_ERROR_MESSAGE)

    if user is None:
        logger.info("Login rejected: unknown email %s", email)
        raise AuthenticationError("존재하지 않는 이메일입니다.")

    try:
        verify_password(password, user.password)
    except AuthenticationError:
        logger.info("Login rejected: wrong password for user %s", user.id)
        raise
    return user


def login_user(db: Session, email: str, password: str, settings: Settings) -> LoginResult:
    """Password login issuing an access token and a persisted refresh token."""
    user = authenticate_user(db, email, password)

    access_token = create_token(user.id, settings)
    refresh_token = create_token(user.id, settings, kind="refresh")
    try:
        user = update_user(db, user.id, refresh_token=refresh_token)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Storing refresh token failed for user %s", user.id)
        raise ServerError(DB_ERROR_MESSAGE)

    logger.info("User %s logged in", user.id)
    return LoginResult(public_user_view(user), access_token, refresh_token)


def refresh_tokens(db: Session, user_id: int, presented: str, settings: Settings) -> TokenPair:
    """
    Exchange the current refresh token for a new access/refresh pair.
    The presented token stops working as soon as this returns.
    """
    user = get_user_by_id(db, user_id)
    if user is None or user.refresh_token is None or user.refresh_token != presented:
        logger.warning("Refresh rejected for user %s", user_id)
        raise AuthenticationError("Unauthorized")

    new_access_token = create_token(user.id, settings)
    new_refresh_token = create_token(user.id, settings, kind="refresh")

    try:
        rotated = rotate_refresh_token(db, user_id, presented, new_refresh_token)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Rotating refresh token failed for user %s", user_id)
        raise ServerError(DB_ERROR_MESSAGE)

    if not rotated:
        logger.warning("Refresh for user %s lost a concurrent rotation", user_id)
        raise AuthenticationError("Unauthorized")

    logger.info("Rotated refresh token for user %s", user_id)
    return TokenPair(new_access_token, new_refresh_token)


def revoke_refresh_token(db: Session, user_id: int) -> None:
    user = get_user_by_id(db, user_id)
    if user is None:
        return
    user.refresh_token = None
    db.commit()


def get_public_user(db: Session, user_id: int) -> Dict[str, Any]:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("Not Found")
    return public_user_view(user)

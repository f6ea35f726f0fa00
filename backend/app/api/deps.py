# app/api/deps.py

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Path, Request
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import AuthenticationError, InvalidTokenError
from app.core.review import authorize_review_mutation
from app.core.security import decode_token
from app.core.user import get_user_by_id
from app.infra.postgres import get_db
from app.models.review import Review

SESSION_USER_KEY = "userId"

# Ids are 32-bit INTEGER columns
MAX_ID = 2**31 - 1


@dataclass(frozen=True)
class CallerIdentity:
    """Who is making the request, whichever gate established it."""

    user_id: int
    source: str  # "session" or "token"


@dataclass(frozen=True)
class RefreshCredentials:
    identity: CallerIdentity
    token: str


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _bearer_token(request: Request) -> Optional[str]:
    parts = request.headers.get("Authorization", "").split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _session_user_id(request: Request, db: Session) -> Optional[int]:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    if get_user_by_id(db, user_id) is None:
        # Session outlived its user
        request.session.pop(SESSION_USER_KEY, None)
        return None
    return user_id


def require_session_user(request: Request, db: Session = Depends(get_db)) -> CallerIdentity:
    user_id = _session_user_id(request, db)
    if user_id is None:
        raise AuthenticationError("Unauthorized")

    identity = CallerIdentity(user_id=user_id, source="session")
    request.state.caller = identity
    return identity


def require_access_token(request: Request, settings: Settings = Depends(get_app_settings)) -> CallerIdentity:
    token = _bearer_token(request)
    if not token:
        raise InvalidTokenError("No authorization token was found")

    claims = decode_token(token, settings)
    identity = CallerIdentity(user_id=claims["userId"], source="token")
    request.state.caller = identity
    return identity


def require_refresh_token(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
) -> RefreshCredentials:
    token = request.cookies.get(settings.refresh_cookie_name) or _bearer_token(request)
    if not token:
        raise InvalidTokenError("No refresh token was found")

    claims = decode_token(token, settings)
    if get_user_by_id(db, claims["userId"]) is None:
        raise AuthenticationError("Unauthorized")

    identity = CallerIdentity(user_id=claims["userId"], source="token")
    request.state.caller = identity
    return RefreshCredentials(identity=identity, token=token)


def resolve_caller(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
) -> Optional[CallerIdentity]:
    """
    Identify the caller from a bearer token if one is sent, else from the
    session. Returns None for anonymous requests; a bad token still fails.
    """
    if _bearer_token(request):
        return require_access_token(request, settings)

    user_id = _session_user_id(request, db)
    if user_id is None:
        return None

    identity = CallerIdentity(user_id=user_id, source="session")
    request.state.caller = identity
    return identity


def require_review_owner(
    review_id: int = Path(..., ge=1, le=MAX_ID),
    caller: Optional[CallerIdentity] = Depends(resolve_caller),
    db: Session = Depends(get_db),
) -> Review:
    return authorize_review_mutation(db, review_id, caller.user_id if caller else None)

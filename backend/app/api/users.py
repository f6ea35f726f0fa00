# app/api/users.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import (
    SESSION_USER_KEY,
    CallerIdentity,
    RefreshCredentials,
    get_app_settings,
    require_access_token,
    require_refresh_token,
)
from app.core.config import Settings
from app.core.errors import ValidationError
from app.core.user import (
    authenticate_user,
    get_public_user,
    login_user,
    public_user_view,
    refresh_tokens,
    register_user,
    revoke_refresh_token,
)
from app.infra.postgres import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterUserSchema(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = None


class LoginSchema(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


def _require_credentials(payload: LoginSchema) -> None:
    if not (payload.email or "").strip() or not (payload.password or "").strip():
        raise ValidationError("email, password 가 모두 필요합니다.")


def set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none",
        path=settings.refresh_cookie_path,
        max_age=int(settings.refresh_token_lifetime.total_seconds()),
    )


@router.post("/users", status_code=201)
def register_user_endpoint(payload: RegisterUserSchema, db: Session = Depends(get_db)):
    if not payload.email or not payload.name or not payload.password:
        raise ValidationError("email, name, password 가 모두 필요합니다.")

    return register_user(db, payload.email, payload.name, payload.password)


@router.post("/login")
def login_endpoint(
    payload: LoginSchema,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Token login: access token in the body, refresh token in a cookie."""
    _require_credentials(payload)

    result = login_user(db, payload.email, payload.password, settings)
    set_refresh_cookie(response, result.refresh_token, settings)
    return {**result.user, "accessToken": result.access_token}


@router.post("/session-login")
def session_login_endpoint(payload: LoginSchema, request: Request, db: Session = Depends(get_db)):
    _require_credentials(payload)

    user = authenticate_user(db, payload.email, payload.password)
    request.session[SESSION_USER_KEY] = user.id
    logger.info("User %s started a session", user.id)
    return public_user_view(user)


@router.post("/logout")
def logout_endpoint(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is not None:
        revoke_refresh_token(db, user_id)
        logger.info("User %s logged out", user_id)
    request.session.clear()
    response.delete_cookie(
        settings.refresh_cookie_name,
        path=settings.refresh_cookie_path,
        secure=settings.cookie_secure,
        httponly=True,
        samesite="none",
    )
    return {"status": "logged_out"}


@router.post("/token/refresh")
def refresh_token_endpoint(
    response: Response,
    credentials: RefreshCredentials = Depends(require_refresh_token),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    tokens = refresh_tokens(db, credentials.identity.user_id, credentials.token, settings)
    set_refresh_cookie(response, tokens.refresh_token, settings)
    return {"accessToken": tokens.access_token}


@router.get("/users/me")
def get_me_endpoint(caller: CallerIdentity = Depends(require_access_token), db: Session = Depends(get_db)):
    return get_public_user(db, caller.user_id)

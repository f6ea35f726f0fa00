# app/core/security.py

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import Settings
from app.core.errors import AuthenticationError, InvalidTokenError

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10

TOKEN_KINDS = ("access", "refresh")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


# ---------- PASSWORDS ----------

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> None:
    """Raise AuthenticationError unless `password` matches `hashed`."""
    if not pwd_context.verify(password, hashed):
        raise AuthenticationError("비밀번호가 일치하지 않습니다.")


# ---------- TOKENS ----------

def create_token(user_id: int, settings: Settings, kind: str = "access") -> str:
    """
    Sign a `{userId}` claim. Access tokens live one hour, refresh tokens two
    weeks. The random `jti` keeps two tokens issued in the same second
    distinct, so a rotated refresh token never equals its predecessor.
    """
    if kind not in TOKEN_KINDS:
        raise ValueError(f"Unknown token kind: {kind}")

    lifetime = settings.refresh_token_lifetime if kind == "refresh" else settings.access_token_lifetime
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "iat": now,
        "exp": now + lifetime,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise InvalidTokenError("Token has expired") from e
    except JWTError as e:
        raise InvalidTokenError("Invalid token") from e

    user_id = claims.get("userId")
    if isinstance(user_id, bool) or not isinstance(user_id, (int, str)):
        raise InvalidTokenError("Invalid token")
    try:
        claims["userId"] = int(user_id)
    except ValueError as e:
        raise InvalidTokenError("Invalid token") from e
    return claims

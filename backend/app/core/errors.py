# app/core/errors.py

from typing import Any, Optional


class AppError(Exception):
    """Base failure carrying an HTTP status and optional structured data."""

    status_code = 500

    def __init__(self, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.data = data


class ValidationError(AppError):
    status_code = 422


class AuthenticationError(AppError):
    status_code = 401


class InvalidTokenError(AuthenticationError):
    # Rendered as a bare 401, outside the JSON envelope
    pass


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ServerError(AppError):
    status_code = 500


# Fixed message for wrapped persistence failures; the cause is only logged
DB_ERROR_MESSAGE = "데이터베이스 작업 중 오류가 발생했습니다"

# app/api/errors.py

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from app.core.errors import AppError, InvalidTokenError

logger = logging.getLogger(__name__)


def error_envelope(request: Request, status_code: int, message: str, data: Optional[Any] = None) -> JSONResponse:
    body = {
        "path": request.url.path,
        "method": request.method,
        "message": message or "Internal Server Error",
        "date": datetime.now(timezone.utc).isoformat(),
    }
    if data is not None:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=body)


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.message)
    return error_envelope(request, exc.status_code, exc.message, exc.data)


async def invalid_token_handler(request: Request, exc: InvalidTokenError):
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return PlainTextResponse("invalid token...", status_code=401)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return error_envelope(request, 422, "Invalid request", details)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_envelope(request, 500, "Internal Server Error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidTokenError, invalid_token_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

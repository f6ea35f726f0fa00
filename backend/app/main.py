# app/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from app.api import products, reviews, users
from app.api.errors import register_error_handlers
from app.core.config import Settings, get_settings
from app.infra.postgres import build_engine, build_session_factory, check_connection, init_db
from app.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logger(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_create_tables:
            init_db(app.state.engine)
        logger.info("🚀 Review shop backend started (%s)", settings.environment)
        yield
        app.state.engine.dispose()

    app = FastAPI(
        title="Review Shop Backend",
        version="1.0.0",
        description="Users, products and reviews with session and JWT authentication",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # One engine per app, built from the settings it was given
    engine = build_engine(settings.database_url)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Server-side login state for /session-login
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.is_production,
    )

    register_error_handlers(app)

    # Register routers
    app.include_router(users.router, tags=["Users"])
    app.include_router(products.router, tags=["Products"])
    app.include_router(reviews.router, tags=["Reviews"])

    @app.get("/health")
    def health_check(request: Request):
        if not check_connection(request.app.state.engine):
            return JSONResponse(status_code=503, content={"status": "degraded", "database": "unavailable"})
        return {"status": "ok", "database": "ok"}

    return app


app = create_app()

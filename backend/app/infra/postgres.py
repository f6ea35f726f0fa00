import logging

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.models.base import Base

logger = logging.getLogger(__name__)

# =========================
# ENGINE CONFIGURATION
# =========================


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:")


def build_engine(database_url: str) -> Engine:
    """
    Create the SQLAlchemy engine for `database_url`.
    SQLite (local runs, tests) gets a thread-tolerant connection since
    FastAPI executes sync routes in a threadpool; an in-memory database is
    pinned to one connection so every session sees the same tables.
    """
    if database_url.startswith("sqlite"):
        extra = {"poolclass": StaticPool} if _is_memory_sqlite(database_url) else {}
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False,
            **extra,
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Check connections before using them
        pool_size=5,         # Maintain 5 connections in the pool
        max_overflow=10,     # Allow 10 extra connections if needed
        pool_recycle=3600,   # Recycle connections every hour
        echo=False           # Set True to see SQL statements (debugging)
    )


# =========================
# SESSION CONFIGURATION
# =========================

def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine
    )


# =========================
# DATABASE FUNCTIONS
# =========================

def get_db(request: Request):
    """
    FastAPI dependency providing a session from the factory that
    `create_app` stored on `app.state`.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def _register_models():
    # Importing the models registers their tables on Base.metadata
    from app.models.user import User  # noqa: F401
    from app.models.product import Product  # noqa: F401
    from app.models.review import Review  # noqa: F401


def init_db(bind: Engine, drop: bool = False):
    """
    Create all tables based on registered models.
    With `drop=True` existing tables (and their rows) are dropped first.
    """
    _register_models()

    if drop:
        Base.metadata.drop_all(bind=bind)
        logger.warning("⚠️  Dropped all tables on %s", bind.url.render_as_string(hide_password=True))

    Base.metadata.create_all(bind=bind)
    logger.info("✅ Database tables created successfully")


def check_connection(bind: Engine) -> bool:
    """Run `SELECT 1`; used by the health endpoint."""
    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("❌ Database connection failed: %s", e)
        return False

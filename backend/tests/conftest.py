import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.infra.postgres import init_db
from app.main import create_app
from app.models.base import Base
from app.models.product import Product  # noqa: F401
from app.models.review import Review  # noqa: F401
from app.models.user import User  # noqa: F401


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        database_url="sqlite://",
        jwt_secret="test-jwt-secret",
        session_secret="test-session-secret",
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def engine(app):
    # in-memory SQLite, shared by every session of this app
    engine = app.state.engine
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(app, engine):
    return app.state.session_factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(app, engine):
    # https so Secure cookies are sent back
    return TestClient(app, base_url="https://testserver")


@pytest.fixture
def other_client(app, engine):
    return TestClient(app, base_url="https://testserver")


def register(client, email="a@x.com", name="A", password="pw"):
    return client.post("/users", json={"email": email, "name": name, "password": password})


def login(client, email="a@x.com", password="pw"):
    return client.post("/login", json={"email": email, "password": password})


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def registered_user(client):
    response = register(client)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def access_token(client, registered_user):
    response = login(client)
    assert response.status_code == 200
    return response.json()["accessToken"]


@pytest.fixture
def product(db):
    product = Product(name="Keyboard", price=45000)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product

from pathlib import Path

from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app


def make_settings(database_url, **overrides):
    return Settings(
        environment="test",
        database_url=database_url,
        jwt_secret="test-jwt-secret",
        session_secret="test-session-secret",
        log_level="WARNING",
        **overrides,
    )


def test_app_uses_configured_database(tmp_path):
    db_file = tmp_path / "shop.db"
    app = create_app(make_settings(f"sqlite:///{db_file}", auto_create_tables=True))

    assert app.state.engine.url.database == str(db_file)

    # entering the client runs startup, which creates the tables
    with TestClient(app, base_url="https://testserver") as client:
        response = client.post("/users", json={"email": "a@x.com", "name": "A", "password": "pw"})

    assert response.status_code == 201
    assert db_file.exists()


def test_apps_do_not_share_databases(tmp_path):
    first = create_app(make_settings(f"sqlite:///{tmp_path / 'one.db'}", auto_create_tables=True))
    second = create_app(make_settings(f"sqlite:///{tmp_path / 'two.db'}", auto_create_tables=True))

    with TestClient(first, base_url="https://testserver") as client:
        assert client.post("/users", json={"email": "a@x.com", "name": "A", "password": "pw"}).status_code == 201
    with TestClient(second, base_url="https://testserver") as client:
        assert client.post("/users", json={"email": "a@x.com", "name": "A", "password": "pw"}).status_code == 201


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


def test_health_reports_unreachable_database(tmp_path):
    missing = Path(tmp_path) / "no-such-dir" / "shop.db"
    app = create_app(make_settings(f"sqlite:///{missing}"))

    response = TestClient(app).get("/health")

    assert response.status_code == 503
    assert response.json() == {"status": "degraded", "database": "unavailable"}

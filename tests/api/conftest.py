import pytest
from fastapi.testclient import TestClient

from src.api.deps import Settings, get_settings
from src.api.main import app


@pytest.fixture
def override_settings(tmp_path):
    def _settings():
        s = Settings()
        s.data_dir = tmp_path / "data"
        s.db_path = str(s.data_dir / "blog.db")
        s.media_dir = s.data_dir / "media"
        s.secret_key = "test-secret"
        return s

    app.dependency_overrides[get_settings] = _settings
    yield _settings()
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_settings):
    # Context manager runs the lifespan, which migrates the temp database
    with TestClient(app) as c:
        yield c


def register_and_login(client, username: str, password: str = "secret123") -> dict:
    """Returns {"id", "headers"} for a fresh account."""
    email = f"{username}@example.com"
    resp = client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )
    assert resp.status_code == 201, resp.text
    login = client.post("/api/auth/login", json={"email": email, "password": password})
    assert login.status_code == 200, login.text
    token = login.json()["access_token"]
    # Keep the client cookie-free so each request authenticates by header only
    client.cookies.clear()
    return {"id": resp.json()["id"], "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
def alice(client):
    return register_and_login(client, "alice")


@pytest.fixture
def bob(client):
    return register_and_login(client, "bob")

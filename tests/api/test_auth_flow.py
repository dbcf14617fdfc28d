from src.domain.entities import DEFAULT_AVATAR_URL


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_register_returns_profile_without_secret(client):
    resp = client.post(
        "/api/auth/register",
        json={"username": "carol", "email": "carol@example.com", "password": "secret123"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["username"] == "carol"
    assert body["avatar_url"] == DEFAULT_AVATAR_URL
    assert "password_hash" not in body


def test_duplicate_registration(client, alice):
    resp = client.post(
        "/api/auth/register",
        json={"username": "alice", "email": "other@example.com", "password": "secret123"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["message"] == "Email or username already registered"


def test_short_password(client):
    resp = client.post(
        "/api/auth/register",
        json={"username": "dave", "email": "dave@example.com", "password": "123"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["errors"][0]["field"] == "password"


def test_login_wrong_password(client, alice):
    resp = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "wrong-one"}
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["message"] == "Invalid email or password"


def test_login_sets_cookie_and_returns_user(client):
    client.post(
        "/api/auth/register",
        json={"username": "erin", "email": "erin@example.com", "password": "secret123"},
    )
    resp = client.post(
        "/api/auth/login", json={"email": "erin@example.com", "password": "secret123"}
    )
    assert resp.status_code == 200
    assert resp.json()["token_type"] == "bearer"
    assert resp.json()["user"]["username"] == "erin"
    assert "access_token" in resp.cookies


def test_me_with_bearer(client, alice):
    resp = client.get("/api/auth/me", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json()["id"] == alice["id"]


def test_me_requires_auth(client):
    assert client.get("/api/auth/me").status_code == 401


def test_me_rejects_garbage_token(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401

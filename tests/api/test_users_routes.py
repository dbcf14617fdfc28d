from uuid import uuid4


def test_get_user(client, alice):
    resp = client.get(f"/api/users/{alice['id']}")
    assert resp.status_code == 200
    assert resp.json()["username"] == "alice"


def test_get_unknown_user(client):
    assert client.get(f"/api/users/{uuid4()}").status_code == 404


def test_update_avatar_and_serve_it(client, alice):
    resp = client.put(
        f"/api/users/{alice['id']}/avatar",
        files={"avatar": ("me.png", b"\x89PNG fake", "image/png")},
        headers=alice["headers"],
    )
    assert resp.status_code == 200, resp.text
    avatar_url = resp.json()["avatar_url"]
    assert avatar_url.startswith("/media/profile/")

    media = client.get(avatar_url)
    assert media.status_code == 200
    assert media.content == b"\x89PNG fake"
    assert media.headers["content-type"] == "image/png"


def test_replacing_avatar_removes_previous_file(client, alice):
    first = client.put(
        f"/api/users/{alice['id']}/avatar",
        files={"avatar": ("a.png", b"one", "image/png")},
        headers=alice["headers"],
    ).json()["avatar_url"]
    client.put(
        f"/api/users/{alice['id']}/avatar",
        files={"avatar": ("b.png", b"two", "image/png")},
        headers=alice["headers"],
    )
    assert client.get(first).status_code == 404


def test_cannot_change_someone_elses_avatar(client, alice, bob):
    resp = client.put(
        f"/api/users/{alice['id']}/avatar",
        files={"avatar": ("me.png", b"x", "image/png")},
        headers=bob["headers"],
    )
    assert resp.status_code == 403


def test_avatar_extension_checked(client, alice):
    resp = client.put(
        f"/api/users/{alice['id']}/avatar",
        files={"avatar": ("me.exe", b"x", "application/octet-stream")},
        headers=alice["headers"],
    )
    assert resp.status_code == 400


def test_media_traversal_is_not_found(client):
    assert client.get("/media/..%2F..%2Fetc%2Fpasswd").status_code == 404

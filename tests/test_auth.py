"""Tests for registration, login, logout and role assignment."""

from giphyblock.permissions import capability_names, ALL_PERMISSIONS


async def register(client, username="alice", password="test1234"):
    return await client.post("/api/v1/auth/register", json={"username": username, "password": password})


async def test_register_returns_token(client):
    r = await register(client)
    assert r.status_code == 201
    body = r.json()
    assert body["user_id"] == 1
    assert body["token"].startswith("gb_sess_")


async def test_register_duplicate_username(client):
    await register(client)
    r = await register(client)
    assert r.status_code == 409
    assert r.json()["detail"]["error"]["code"] == "AUTH_FAILED"


async def test_register_short_password(client):
    r = await register(client, password="short")
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_first_user_is_administrator(client):
    r = await register(client)
    h = {"Authorization": f"Bearer {r.json()['token']}"}
    me = await client.get("/api/v1/users/@me", headers=h)
    assert me.status_code == 200
    assert me.json()["roles"] == ["administrator"]
    assert me.json()["capabilities"] == capability_names(ALL_PERMISSIONS)


async def test_second_user_is_subscriber(client):
    await register(client, "alice")
    r = await register(client, "bob")
    h = {"Authorization": f"Bearer {r.json()['token']}"}
    me = await client.get("/api/v1/users/@me", headers=h)
    assert me.json()["roles"] == []
    assert me.json()["capabilities"] == ["read"]


async def test_login_and_logout(client):
    await register(client)
    r = await client.post("/api/v1/auth/login", json={"username": "alice", "password": "test1234"})
    assert r.status_code == 200
    token = r.json()["token"]
    assert r.json()["display_name"] == "alice"
    assert len(r.json()["roles"]) == 1
    h = {"Authorization": f"Bearer {token}"}

    r = await client.post("/api/v1/auth/logout", headers=h)
    assert r.status_code == 204

    r = await client.get("/api/v1/users/@me", headers=h)
    assert r.status_code == 401


async def test_login_wrong_password(client):
    await register(client)
    r = await client.post("/api/v1/auth/login", json={"username": "alice", "password": "wrongpass"})
    assert r.status_code == 401
    assert r.json()["detail"]["error"]["code"] == "AUTH_FAILED"


async def test_login_unknown_user(client):
    r = await client.post("/api/v1/auth/login", json={"username": "ghost", "password": "whatever1"})
    assert r.status_code == 401


async def test_bad_authorization_scheme(client):
    r = await register(client)
    h = {"Authorization": f"Token {r.json()['token']}"}
    r = await client.get("/api/v1/users/@me", headers=h)
    assert r.status_code == 401
    assert r.json()["detail"]["error"]["code"] == "AUTH_FAILED"


async def test_set_role(client):
    admin = await register(client, "alice")
    bob = await register(client, "bob")
    h_admin = {"Authorization": f"Bearer {admin.json()['token']}"}

    r = await client.put(f"/api/v1/users/{bob.json()['user_id']}/role", headers=h_admin, json={"role": "editor"})
    assert r.status_code == 200
    assert r.json()["roles"] == ["editor"]
    assert "edit_posts" in r.json()["capabilities"]
    assert "manage_options" not in r.json()["capabilities"]

    # Reassigning replaces the previous role
    r = await client.put(f"/api/v1/users/{bob.json()['user_id']}/role", headers=h_admin, json={"role": "author"})
    assert r.json()["roles"] == ["author"]


async def test_set_role_requires_promote_users(client):
    await register(client, "alice")
    bob = await register(client, "bob")
    h_bob = {"Authorization": f"Bearer {bob.json()['token']}"}
    r = await client.put(f"/api/v1/users/{bob.json()['user_id']}/role", headers=h_bob, json={"role": "administrator"})
    assert r.status_code == 403


async def test_set_role_unknown(client):
    admin = await register(client, "alice")
    h = {"Authorization": f"Bearer {admin.json()['token']}"}
    r = await client.put("/api/v1/users/1/role", headers=h, json={"role": "overlord"})
    assert r.status_code == 404
    assert r.json()["detail"]["error"]["code"] == "ROLE_NOT_FOUND"
    r = await client.put("/api/v1/users/99/role", headers=h, json={"role": "editor"})
    assert r.status_code == 404
    assert r.json()["detail"]["error"]["code"] == "USER_NOT_FOUND"


async def test_health(client):
    r = await client.get("/health")
    assert r.json() == {"status": "ok"}
    r = await client.get("/ready")
    assert r.status_code == 200

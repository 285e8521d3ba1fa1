"""Tests for the API key endpoint."""

from giphyblock.config import API_KEY_OPTION, _db_values

URL = "/dmgiphyblock/v1/api-key"


async def auth(client, username="alice"):
    r = await client.post("/api/v1/auth/register", json={"username": username, "password": "test1234"})
    return {"Authorization": f"Bearer {r.json()['token']}"}


async def test_get_api_key_unset_is_empty_string(client):
    h = await auth(client)
    r = await client.get(URL, headers=h)
    assert r.status_code == 200
    assert r.json() == ""


async def test_post_api_key_stores_raw_body(client):
    h = await auth(client)
    r = await client.post(URL, headers=h, content=b"ABC123")
    assert r.status_code == 201
    assert r.json() == "ABC123"

    r = await client.get(URL, headers=h)
    assert r.status_code == 200
    assert r.json() == "ABC123"
    assert _db_values[API_KEY_OPTION] == "ABC123"


async def test_put_and_patch_are_editable(client):
    h = await auth(client)
    r = await client.put(URL, headers=h, content=b"first")
    assert r.status_code == 201
    r = await client.patch(URL, headers=h, content=b"second")
    assert r.status_code == 201
    assert r.json() == "second"

    r = await client.get(URL, headers=h)
    assert r.json() == "second"


async def test_overwrite_keeps_single_value(client):
    h = await auth(client)
    await client.post(URL, headers=h, content=b"one")
    await client.post(URL, headers=h, content=b"two")
    r = await client.get(URL, headers=h)
    assert r.json() == "two"


async def test_empty_body_clears_key(client):
    h = await auth(client)
    await client.post(URL, headers=h, content=b"ABC123")
    r = await client.post(URL, headers=h, content=b"")
    assert r.status_code == 201
    assert r.json() == ""
    r = await client.get(URL, headers=h)
    assert r.json() == ""


async def test_key_too_long_rejected(client):
    h = await auth(client)
    r = await client.post(URL, headers=h, content=b"x" * 129)
    assert r.status_code == 422
    assert r.json()["detail"]["error"]["code"] == "VALIDATION_ERROR"

    r = await client.get(URL, headers=h)
    assert r.json() == ""


async def test_pasted_key_stored_verbatim(client):
    h = await auth(client)
    r = await client.post(URL, headers=h, content=b"ABC123\n")
    assert r.status_code == 201
    assert r.json() == "ABC123\n"

    r = await client.get(URL, headers=h)
    assert r.json() == "ABC123\n"


async def test_requires_auth(client):
    r = await client.get(URL)
    assert r.status_code in (401, 422)
    r = await client.post(URL, content=b"ABC123")
    assert r.status_code in (401, 422)


async def test_invalid_token_rejected(client):
    r = await client.get(URL, headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert r.json()["detail"]["error"]["code"] == "AUTH_EXPIRED"


async def test_subscriber_forbidden(client):
    admin = await auth(client, "alice")
    subscriber = await auth(client, "bob")
    await client.post(URL, headers=admin, content=b"ABC123")

    r = await client.get(URL, headers=subscriber)
    assert r.status_code == 403
    assert r.json()["detail"]["error"]["code"] == "MISSING_PERMISSIONS"
    assert r.json()["detail"]["error"]["missing_permission"] == "edit_posts"

    r = await client.post(URL, headers=subscriber, content=b"stolen")
    assert r.status_code == 403

    r = await client.get(URL, headers=admin)
    assert r.json() == "ABC123"


async def test_contributor_can_read_and_write(client):
    admin = await auth(client, "alice")
    h = await auth(client, "bob")
    me = await client.get("/api/v1/users/@me", headers=h)
    r = await client.put(
        f"/api/v1/users/{me.json()['user_id']}/role", headers=admin, json={"role": "contributor"}
    )
    assert r.status_code == 200

    r = await client.post(URL, headers=h, content=b"FROM_BOB")
    assert r.status_code == 201
    r = await client.get(URL, headers=admin)
    assert r.json() == "FROM_BOB"


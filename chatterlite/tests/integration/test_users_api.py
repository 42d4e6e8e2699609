# chatterlite/tests/integration/test_users_api.py
import pytest


@pytest.mark.asyncio
async def test_sync_user(client):
    response = await client.post(
        "/api/users/sync",
        json={"id": "ext-1", "email": "Dana@Example.com", "fullName": "Dana Scully"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "ext-1"
    assert data["email"] == "dana@example.com"
    assert data["fullName"] == "Dana Scully"
    assert "hashedPassword" not in data


@pytest.mark.asyncio
async def test_sync_user_requires_fields(client):
    response = await client.post("/api/users/sync", json={"id": "ext-1"})
    assert response.status_code == 400
    assert response.json() == {"message": "User ID, email, and fullName are required"}


@pytest.mark.asyncio
async def test_search_users(client, alice, bob):
    response = await client.get("/api/users/search", params={"q": "  ALICE "})
    assert response.status_code == 200
    assert [u["id"] for u in response.json()] == [alice[0]["id"]]


@pytest.mark.asyncio
async def test_search_requires_query(client):
    response = await client.get("/api/users/search")
    assert response.status_code == 400
    assert response.json() == {"message": "Search query is required"}


@pytest.mark.asyncio
async def test_read_user(client, alice):
    user, _ = alice
    response = await client.get(f"/api/users/{user['id']}")
    assert response.status_code == 200
    assert response.json()["fullName"] == "Alice Cooper"

    response = await client.get("/api/users/nobody")
    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


@pytest.mark.asyncio
async def test_update_own_profile(client, alice):
    user, headers = alice
    response = await client.put(
        f"/api/users/{user['id']}",
        json={"avatarUrl": "https://example.com/a.png"},
        headers=headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["avatarUrl"] == "https://example.com/a.png"
    assert data["fullName"] == "Alice Cooper"


@pytest.mark.asyncio
async def test_update_other_profile_forbidden(client, alice, bob):
    _, headers = alice
    response = await client.put(
        f"/api/users/{bob[0]['id']}", json={"fullName": "Mallory"}, headers=headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_profile_requires_token(client, alice):
    response = await client.put(f"/api/users/{alice[0]['id']}", json={"fullName": "Mallory"})
    assert response.status_code == 401
    assert response.json() == {"message": "Not authenticated"}

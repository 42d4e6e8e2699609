# chatterlite/tests/integration/test_chats_api.py
import pytest


async def open_chat(client, owner, *others, **extra):
    response = await client.post(
        "/api/chats",
        json={"memberIds": [o[0]["id"] for o in others], **extra},
        headers=owner[1],
    )
    assert response.status_code == 200, response.json()
    return response.json()


@pytest.mark.asyncio
async def test_direct_chat_is_named_after_other_member(client, alice, bob):
    chat = await open_chat(client, alice, bob)
    assert chat["isGroup"] is False
    assert chat["createdBy"] == alice[0]["id"]

    response = await client.get("/api/chats", headers=alice[1])
    assert response.status_code == 200
    summaries = response.json()
    assert summaries[0]["name"] == "Bob Johnson"
    assert summaries[0]["lastMessage"] is None
    assert summaries[0]["unreadCount"] == 0


@pytest.mark.asyncio
async def test_group_chat_keeps_its_name(client, alice, bob, sign_up):
    carol = await sign_up("Carol King")
    await open_chat(client, alice, bob, carol, name="  Book club ", isGroup=True)

    response = await client.get("/api/chats", headers=carol[1])
    assert [c["name"] for c in response.json()] == ["Book club"]


@pytest.mark.asyncio
async def test_create_chat_validation(client, alice):
    response = await client.post("/api/chats", json={"memberIds": []}, headers=alice[1])
    assert response.status_code == 400

    response = await client.post("/api/chats", json={"memberIds": ["ghost"]}, headers=alice[1])
    assert response.status_code == 404

    response = await client.post("/api/chats", json={"memberIds": "oops"}, headers=alice[1])
    assert response.status_code == 400
    assert set(response.json()) == {"message"}


@pytest.mark.asyncio
async def test_chats_require_token(client):
    response = await client.get("/api/chats")
    assert response.status_code == 401

    response = await client.get("/api/chats", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert set(response.json()) == {"message"}


@pytest.mark.asyncio
async def test_send_and_list_messages(client, alice, bob):
    chat = await open_chat(client, alice, bob)
    url = f"/api/chats/{chat['id']}/messages"

    response = await client.post(url, json={"content": "  hello bob  "}, headers=alice[1])
    assert response.status_code == 204
    response = await client.post(url, json={"content": "   "}, headers=alice[1])
    assert response.status_code == 204
    response = await client.post(url, json={"content": "hi alice"}, headers=bob[1])
    assert response.status_code == 204

    response = await client.get(url, headers=bob[1])
    assert response.status_code == 200
    messages = response.json()
    assert [m["content"] for m in messages] == ["hello bob", "hi alice"]
    assert messages[0]["sender"]["fullName"] == "Alice Cooper"
    assert messages[0]["messageType"] == "text"

    response = await client.get("/api/chats", headers=alice[1])
    assert response.json()[0]["lastMessage"] == "hi alice"


@pytest.mark.asyncio
async def test_reply_must_stay_in_chat(client, alice, bob, sign_up):
    carol = await sign_up("Carol King")
    chat = await open_chat(client, alice, bob)
    other = await open_chat(client, alice, carol)

    await client.post(
        f"/api/chats/{other['id']}/messages", json={"content": "elsewhere"}, headers=alice[1]
    )
    foreign = (await client.get(f"/api/chats/{other['id']}/messages", headers=alice[1])).json()[0]

    response = await client.post(
        f"/api/chats/{chat['id']}/messages",
        json={"content": "re", "replyToId": foreign["id"]},
        headers=alice[1],
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_non_member_cannot_read_or_write(client, alice, bob, sign_up):
    mallory = await sign_up("Mallory Mole")
    chat = await open_chat(client, alice, bob)
    url = f"/api/chats/{chat['id']}/messages"

    response = await client.get(url, headers=mallory[1])
    assert response.status_code == 404
    assert response.json() == {"message": "Chat not found"}

    response = await client.post(url, json={"content": "sneaky"}, headers=mallory[1])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_add_member_to_group(client, alice, bob, sign_up):
    carol = await sign_up("Carol King")
    chat = await open_chat(client, alice, bob, name="Team", isGroup=True)

    response = await client.post(
        f"/api/chats/{chat['id']}/members", json={"userId": carol[0]["id"]}, headers=alice[1]
    )
    assert response.status_code == 204

    response = await client.get("/api/chats", headers=carol[1])
    assert [c["name"] for c in response.json()] == ["Team"]


@pytest.mark.asyncio
async def test_direct_chat_is_capped_at_two_members(client, alice, bob, sign_up):
    carol = await sign_up("Carol King")
    chat = await open_chat(client, alice, bob)

    response = await client.post(
        f"/api/chats/{chat['id']}/members", json={"userId": carol[0]["id"]}, headers=alice[1]
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_upload_attachment(client, alice, bob):
    chat = await open_chat(client, alice, bob)

    response = await client.post(
        f"/api/chats/{chat['id']}/attachments",
        files={"file": ("photo.png", b"\x89PNG data", "image/png")},
        headers=alice[1],
    )
    assert response.status_code == 200
    url = response.json()["url"]
    assert url.startswith(f"/files/chat-files/{alice[0]['id']}/")
    assert url.endswith(".png")

    messages = (await client.get(f"/api/chats/{chat['id']}/messages", headers=bob[1])).json()
    assert messages[0]["messageType"] == "image"
    assert messages[0]["fileUrl"] == url
    assert messages[0]["content"] == "Shared photo.png"

    response = await client.get(url)
    assert response.status_code == 200
    assert response.content == b"\x89PNG data"


@pytest.mark.asyncio
async def test_toggle_reaction(client, alice, bob):
    chat = await open_chat(client, alice, bob)
    url = f"/api/chats/{chat['id']}/messages"
    await client.post(url, json={"content": "react to me"}, headers=alice[1])
    message = (await client.get(url, headers=bob[1])).json()[0]

    response = await client.post(
        f"/api/messages/{message['id']}/reactions", json={"emoji": "❤️"}, headers=bob[1]
    )
    assert response.status_code == 200
    assert response.json() == {"messageId": message["id"], "emoji": "❤️", "reacted": True}

    reactions = (await client.get(url, headers=alice[1])).json()[0]["reactions"]
    assert reactions == [{"emoji": "❤️", "count": 1, "users": [bob[0]["id"]]}]

    response = await client.post(
        f"/api/messages/{message['id']}/reactions", json={"emoji": "❤️"}, headers=bob[1]
    )
    assert response.json()["reacted"] is False
    assert (await client.get(url, headers=alice[1])).json()[0]["reactions"] == []


@pytest.mark.asyncio
async def test_reaction_on_unknown_message(client, alice):
    response = await client.post(
        "/api/messages/missing/reactions", json={"emoji": "👍"}, headers=alice[1]
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected(client, alice, bob, app_config, tmp_path):
    chat = await open_chat(client, alice, bob)

    response = await client.post(
        f"/api/chats/{chat['id']}/attachments",
        files={"file": ("big.zip", b"x" * (app_config.MAX_UPLOAD_SIZE + 1), "application/zip")},
        headers=alice[1],
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Attachment exceeds allowed size"}

    messages = (await client.get(f"/api/chats/{chat['id']}/messages", headers=bob[1])).json()
    assert messages == []
    bucket = tmp_path / "uploads" / "chat-files"
    assert not bucket.exists() or not any(bucket.rglob("*.zip"))

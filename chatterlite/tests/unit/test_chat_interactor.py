# chatterlite/tests/unit/test_chat_interactor.py
from datetime import UTC, datetime

import pytest

from chatterlite.domain.entities import Chat, Message, User, new_id
from chatterlite.domain.errors import NotFoundError, ValidationError
from chatterlite.infrastructure import schemas
from chatterlite.interactors.chat_interactor import ChatInteractor


def ts(seconds):
    return datetime.fromtimestamp(seconds, UTC)


@pytest.fixture
def interactor(store, event_dispatcher):
    return ChatInteractor(store, event_dispatcher)


async def add_user(store, user_id, full_name, avatar_url=None):
    await store.users.create_user(
        User(id=user_id, email=f"{user_id}@example.com", full_name=full_name, avatar_url=avatar_url)
    )
    await store.commit()


async def add_chat(store, member_ids, name=None, is_group=False, created_at=ts(0)):
    chat = await store.chats.create_chat(
        Chat(id=new_id(), name=name, is_group=is_group, created_at=created_at)
    )
    for member_id in member_ids:
        await store.chats.add_member(chat.id, member_id)
    await store.commit()
    return chat


async def add_message(store, chat_id, sender_id, content, created_at):
    await store.messages.create_message(
        Message(id=new_id(), chat_id=chat_id, sender_id=sender_id, content=content, created_at=created_at)
    )
    await store.commit()


@pytest.fixture
async def users(store):
    await add_user(store, "u1", "Alice Cooper")
    await add_user(store, "u2", "Bob Johnson", avatar_url="https://cdn.example.com/bob.png")
    await add_user(store, "u3", "Carol King")


@pytest.mark.asyncio
async def test_no_memberships_no_chats(interactor, users):
    assert await interactor.get_chat_summaries("u1") == []


@pytest.mark.asyncio
async def test_sorted_by_last_activity(interactor, store, users):
    chat_a = await add_chat(store, ["u1", "u2"], name="A", created_at=ts(5))
    chat_b = await add_chat(store, ["u1", "u3"], name="B", created_at=ts(10))
    await add_message(store, chat_a.id, "u2", "older", ts(50))
    await add_message(store, chat_a.id, "u1", "latest", ts(100))

    summaries = await interactor.get_chat_summaries("u1")

    assert [s.id for s in summaries] == [chat_a.id, chat_b.id]
    assert summaries[0].last_message == "latest"
    assert summaries[0].last_message_time == ts(100)
    assert summaries[1].last_message is None
    assert summaries[1].last_message_time is None
    assert summaries[1].created_at == ts(10)
    assert all(s.unread_count == 0 for s in summaries)


@pytest.mark.asyncio
async def test_chat_without_messages_can_outrank_older_activity(interactor, store, users):
    quiet = await add_chat(store, ["u1", "u3"], name="Quiet", created_at=ts(200))
    busy = await add_chat(store, ["u1", "u2"], name="Busy", created_at=ts(1))
    await add_message(store, busy.id, "u2", "hi", ts(100))

    summaries = await interactor.get_chat_summaries("u1")

    assert [s.id for s in summaries] == [quiet.id, busy.id]


@pytest.mark.asyncio
async def test_direct_chat_named_after_other_member(interactor, store, users):
    await add_chat(store, ["u1", "u2"])

    alice_view = await interactor.get_chat_summaries("u1")
    bob_view = await interactor.get_chat_summaries("u2")

    assert alice_view[0].name == "Bob Johnson"
    assert alice_view[0].avatar_url == "https://cdn.example.com/bob.png"
    assert bob_view[0].name == "Alice Cooper"


@pytest.mark.asyncio
async def test_direct_chat_without_counterpart_is_unknown(interactor, store, users):
    await add_chat(store, ["u1"])
    summaries = await interactor.get_chat_summaries("u1")
    assert summaries[0].name == "Unknown"


@pytest.mark.asyncio
async def test_group_and_named_chats_keep_their_name(interactor, store, users):
    await add_chat(store, ["u1", "u2", "u3"], name="Team", is_group=True)
    await add_chat(store, ["u1", "u2"], name="Project X")

    names = {s.name for s in await interactor.get_chat_summaries("u1")}
    assert names == {"Team", "Project X"}


@pytest.mark.asyncio
async def test_create_direct_chat(interactor, store, change_feed, users):
    seen = []
    change_feed.subscribe("chat_members", seen.append)

    chat = await interactor.create_chat("u1", schemas.ChatCreate(member_ids=["u2"]))
    await change_feed.drain()

    assert chat.is_group is False
    assert chat.created_by == "u1"
    assert sorted(await store.chats.get_member_ids(chat.id)) == ["u1", "u2"]
    assert sorted(change.record["user_id"] for change in seen) == ["u1", "u2"]


@pytest.mark.asyncio
async def test_create_chat_validation(interactor, users):
    with pytest.raises(ValidationError):
        await interactor.create_chat("u1", schemas.ChatCreate(member_ids=[]))
    with pytest.raises(ValidationError):
        await interactor.create_chat("u1", schemas.ChatCreate(member_ids=["u2", "u3"]))
    with pytest.raises(NotFoundError):
        await interactor.create_chat("u1", schemas.ChatCreate(member_ids=["ghost"]))


@pytest.mark.asyncio
async def test_create_group_chat(interactor, store, users):
    chat = await interactor.create_chat(
        "u1", schemas.ChatCreate(member_ids=["u2", "u3", "u2"], name=" Team ", is_group=True)
    )
    assert chat.name == "Team"
    assert sorted(await store.chats.get_member_ids(chat.id)) == ["u1", "u2", "u3"]


@pytest.mark.asyncio
async def test_direct_chat_member_cap(interactor, store, users):
    direct = await add_chat(store, ["u1", "u2"])
    with pytest.raises(ValidationError):
        await interactor.add_member(direct.id, "u3")

    group = await add_chat(store, ["u1", "u2"], name="Group", is_group=True)
    await interactor.add_member(group.id, "u3")
    assert "u3" in await store.chats.get_member_ids(group.id)

    with pytest.raises(ValidationError):
        await interactor.add_member(group.id, "u3")


@pytest.mark.asyncio
async def test_membership_checks(interactor, store, users):
    chat = await add_chat(store, ["u1", "u2"])

    assert await interactor.is_member(chat.id, "u1")
    await interactor.ensure_member(chat.id, "u2")
    with pytest.raises(NotFoundError):
        await interactor.ensure_member(chat.id, "u3")
    with pytest.raises(NotFoundError):
        await interactor.get_chat("missing")

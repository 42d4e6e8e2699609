# chatterlite/tests/unit/test_user_interactor.py
from unittest.mock import AsyncMock

import pytest

from chatterlite.domain.errors import NotFoundError, ValidationError
from chatterlite.infrastructure import schemas
from chatterlite.interactors.user_interactor import UserInteractor


@pytest.fixture
def dispatcher():
    return AsyncMock()


@pytest.fixture
def interactor(store, dispatcher):
    return UserInteractor(store, dispatcher)


@pytest.mark.asyncio
async def test_sync_creates_then_returns_existing(interactor, dispatcher):
    payload = schemas.UserSync(id="auth-1", email="New@Example.com", full_name="New User")

    created = await interactor.sync_user(payload)
    assert created.id == "auth-1"
    assert created.email == "new@example.com"
    dispatcher.dispatch.assert_awaited_once()

    again = await interactor.sync_user(
        schemas.UserSync(id="auth-1", email="new@example.com", full_name="Renamed")
    )
    assert again.full_name == "New User"
    assert dispatcher.dispatch.await_count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"email": "a@example.com", "fullName": "A"},
        {"id": "u1", "fullName": "A"},
        {"id": "u1", "email": "a@example.com"},
    ],
)
async def test_sync_requires_identity_fields(interactor, payload):
    with pytest.raises(ValidationError) as exc_info:
        await interactor.sync_user(schemas.UserSync.model_validate(payload))
    assert exc_info.value.message == "User ID, email, and fullName are required"


@pytest.mark.asyncio
async def test_search_is_case_insensitive(interactor):
    await interactor.sync_user(schemas.UserSync(id="u1", email="emma@example.com", full_name="Emma Davis"))
    await interactor.sync_user(schemas.UserSync(id="u2", email="john@example.com", full_name="John Smith"))

    results = await interactor.search_users("  EMMA ")
    assert [u.id for u in results] == ["u1"]


@pytest.mark.asyncio
@pytest.mark.parametrize("query", [None, "", "   "])
async def test_search_requires_query(interactor, query):
    with pytest.raises(ValidationError) as exc_info:
        await interactor.search_users(query)
    assert exc_info.value.message == "Search query is required"


@pytest.mark.asyncio
async def test_get_user_not_found(interactor):
    with pytest.raises(NotFoundError):
        await interactor.get_user("missing")


@pytest.mark.asyncio
async def test_update_profile(interactor):
    await interactor.sync_user(schemas.UserSync(id="u1", email="a@example.com", full_name="A"))

    updated = await interactor.update_profile(
        "u1", schemas.UserUpdate(avatar_url="https://cdn.example.com/a.png")
    )
    assert updated.avatar_url == "https://cdn.example.com/a.png"
    assert updated.full_name == "A"

    with pytest.raises(ValidationError):
        await interactor.update_profile("u1", schemas.UserUpdate(full_name="  "))
    with pytest.raises(NotFoundError):
        await interactor.update_profile("missing", schemas.UserUpdate(full_name="B"))

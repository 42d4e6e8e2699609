# chatterlite/interactors/user_interactor.py
from chatterlite.domain.entities import User
from chatterlite.domain.errors import NotFoundError, ValidationError
from chatterlite.domain.events import UserChanged, row_record
from chatterlite.gateways.interfaces import IDataStore
from chatterlite.infrastructure import schemas
from chatterlite.infrastructure.event_dispatcher import EventDispatcher


class UserInteractor:
    def __init__(self, store: IDataStore, event_dispatcher: EventDispatcher):
        self.store = store
        self.event_dispatcher = event_dispatcher

    async def sync_user(self, payload: schemas.UserSync) -> schemas.User:
        """Return the profile for an authenticated identity, creating it on first sight."""
        if not payload.id or not payload.email or not payload.full_name:
            raise ValidationError("User ID, email, and fullName are required")

        user = await self.store.users.get_user(payload.id)
        if user:
            return schemas.User.model_validate(user)

        user = await self.store.users.create_user(
            User(
                id=payload.id,
                email=payload.email.strip().lower(),
                full_name=payload.full_name,
                avatar_url=payload.avatar_url or None,
            )
        )
        await self.store.commit()
        await self.event_dispatcher.dispatch(UserChanged(event="INSERT", record=row_record(user)))
        return schemas.User.model_validate(user)

    async def search_users(self, query: str | None) -> list[schemas.User]:
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        users = await self.store.users.search_users(query.lower().strip())
        return [schemas.User.model_validate(user) for user in users]

    async def get_user(self, user_id: str) -> schemas.User:
        user = await self.store.users.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return schemas.User.model_validate(user)

    async def update_profile(self, user_id: str, update: schemas.UserUpdate) -> schemas.User:
        changes = update.model_dump(exclude_unset=True)
        if "full_name" in changes and not (changes["full_name"] or "").strip():
            raise ValidationError("Full name cannot be empty")
        user = await self.store.users.update_user(user_id, changes)
        if not user:
            raise NotFoundError("User not found")
        await self.store.commit()
        await self.event_dispatcher.dispatch(UserChanged(event="UPDATE", record=row_record(user)))
        return schemas.User.model_validate(user)

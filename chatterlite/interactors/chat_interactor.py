# chatterlite/interactors/chat_interactor.py
from datetime import UTC, datetime
from typing import List

from chatterlite.domain.entities import Chat, ChatMember, new_id
from chatterlite.domain.errors import NotFoundError, ValidationError
from chatterlite.domain.events import ChatChanged, ChatMemberChanged, row_record
from chatterlite.gateways.interfaces import IDataStore
from chatterlite.infrastructure import schemas
from chatterlite.infrastructure.event_dispatcher import EventDispatcher

EPOCH = datetime.fromtimestamp(0, UTC)
UNKNOWN_CHAT_NAME = "Unknown"


class ChatInteractor:
    def __init__(self, store: IDataStore, event_dispatcher: EventDispatcher):
        self.store = store
        self.event_dispatcher = event_dispatcher

    async def get_chat_summaries(self, user_id: str) -> List[schemas.ChatSummary]:
        """Chats visible to ``user_id``, most recently active first.

        Latest messages for all chats are fetched in one batch, newest first,
        and only the first row per chat is kept. Unnamed direct chats take the
        name and avatar of the other member. Chats without messages sort by
        their creation time.
        """
        memberships = await self.store.chats.get_memberships(user_id)
        if not memberships:
            return []

        chats = [m.chat for m in memberships if m.chat is not None]
        latest = {}
        for message in await self.store.messages.latest_messages([c.id for c in chats]):
            latest.setdefault(message.chat_id, message)

        summaries = []
        for chat in chats:
            name = chat.name
            avatar_url = chat.avatar_url
            if not name and not chat.is_group:
                other = await self.store.chats.get_other_member(chat.id, user_id)
                name = other.full_name if other else UNKNOWN_CHAT_NAME
                avatar_url = other.avatar_url if other else None
            last = latest.get(chat.id)
            summaries.append(
                schemas.ChatSummary(
                    id=chat.id,
                    name=name or UNKNOWN_CHAT_NAME,
                    is_group=chat.is_group,
                    avatar_url=avatar_url,
                    last_message=last.content if last else None,
                    last_message_time=last.created_at if last else None,
                    created_at=chat.created_at,
                )
            )

        summaries.sort(key=lambda s: s.last_message_time or s.created_at or EPOCH, reverse=True)
        return summaries

    async def get_chat(self, chat_id: str) -> schemas.Chat:
        chat = await self.store.chats.get_chat(chat_id)
        if not chat:
            raise NotFoundError("Chat not found")
        return schemas.Chat.model_validate(chat)

    async def is_member(self, chat_id: str, user_id: str) -> bool:
        return user_id in await self.store.chats.get_member_ids(chat_id)

    async def ensure_member(self, chat_id: str, user_id: str) -> None:
        # non-members get the same answer as for a missing chat
        if not await self.is_member(chat_id, user_id):
            raise NotFoundError("Chat not found")

    async def create_chat(self, creator_id: str, chat_create: schemas.ChatCreate) -> schemas.Chat:
        member_ids = [m for m in dict.fromkeys(chat_create.member_ids) if m != creator_id]
        if not member_ids:
            raise ValidationError("At least one other member is required")
        if not chat_create.is_group and len(member_ids) != 1:
            raise ValidationError("A direct chat must have exactly one other member")

        known = await self.store.users.get_users(member_ids)
        missing = set(member_ids) - {u.id for u in known}
        if missing:
            raise NotFoundError(f"Users not found: {', '.join(sorted(missing))}")

        chat = await self.store.chats.create_chat(
            Chat(
                id=new_id(),
                name=(chat_create.name or "").strip() or None,
                is_group=chat_create.is_group,
                created_by=creator_id,
            )
        )
        members = [await self.store.chats.add_member(chat.id, uid) for uid in [creator_id, *member_ids]]
        await self.store.commit()
        await self.publish_chat_created(chat, members)
        return schemas.Chat.model_validate(chat)

    async def add_member(self, chat_id: str, user_id: str) -> None:
        chat = await self.store.chats.get_chat(chat_id)
        if not chat:
            raise NotFoundError("Chat not found")
        member_ids = await self.store.chats.get_member_ids(chat_id)
        if user_id in member_ids:
            raise ValidationError("User is already a member of this chat")
        if not chat.is_group and len(member_ids) >= 2:
            raise ValidationError("A direct chat cannot have more than two members")
        if not await self.store.users.get_user(user_id):
            raise NotFoundError("User not found")

        member = await self.store.chats.add_member(chat_id, user_id)
        await self.store.commit()
        await self.event_dispatcher.dispatch(
            ChatMemberChanged(event="INSERT", record=row_record(member))
        )

    async def publish_chat_created(self, chat: Chat, members: List[ChatMember]) -> None:
        await self.event_dispatcher.dispatch(ChatChanged(event="INSERT", record=row_record(chat)))
        for member in members:
            await self.event_dispatcher.dispatch(
                ChatMemberChanged(event="INSERT", record=row_record(member))
            )

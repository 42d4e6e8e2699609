# chatterlite/gateways/memory_gateway.py
from dataclasses import dataclass, field, replace
from typing import Any

from chatterlite.domain.entities import (
    Chat,
    ChatMember,
    FriendRequest,
    FriendRequestStatus,
    Message,
    Reaction,
    Session,
    User,
    new_id,
    utcnow,
)
from chatterlite.domain.errors import ConstraintViolation
from chatterlite.gateways.interfaces import (
    IChatGateway,
    IDataStore,
    IFriendRequestGateway,
    IMessageGateway,
    IReactionGateway,
    ISessionGateway,
    IUserGateway,
)


@dataclass
class MemoryTables:
    users: dict[str, User] = field(default_factory=dict)
    chats: dict[str, Chat] = field(default_factory=dict)
    chat_members: dict[str, ChatMember] = field(default_factory=dict)
    messages: dict[str, Message] = field(default_factory=dict)
    reactions: dict[str, Reaction] = field(default_factory=dict)
    friend_requests: dict[str, FriendRequest] = field(default_factory=dict)
    sessions: dict[str, Session] = field(default_factory=dict)


class MemoryUserGateway(IUserGateway):
    def __init__(self, tables: MemoryTables):
        self.tables = tables

    async def get_user(self, user_id: str) -> User | None:
        user = self.tables.users.get(user_id)
        return replace(user) if user else None

    async def get_by_email(self, email: str) -> User | None:
        email = email.lower()
        user = next((u for u in self.tables.users.values() if u.email.lower() == email), None)
        return replace(user) if user else None

    async def get_users(self, user_ids: list[str]) -> list[User]:
        return [replace(self.tables.users[uid]) for uid in user_ids if uid in self.tables.users]

    async def create_user(self, user: User) -> User:
        if user.id in self.tables.users or await self.get_by_email(user.email):
            raise ConstraintViolation("User already exists")
        self.tables.users[user.id] = replace(user)
        return replace(user)

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> User | None:
        user = self.tables.users.get(user_id)
        if user is None:
            return None
        for key, value in changes.items():
            setattr(user, key, value)
        return replace(user)

    async def search_users(self, query: str) -> list[User]:
        return [
            replace(user)
            for user in self.tables.users.values()
            if query in user.email.lower() or query in user.full_name.lower()
        ]


class MemoryChatGateway(IChatGateway):
    def __init__(self, tables: MemoryTables):
        self.tables = tables

    async def get_chat(self, chat_id: str) -> Chat | None:
        chat = self.tables.chats.get(chat_id)
        return replace(chat) if chat else None

    async def create_chat(self, chat: Chat) -> Chat:
        self.tables.chats[chat.id] = replace(chat)
        return replace(chat)

    async def add_member(self, chat_id: str, user_id: str) -> ChatMember:
        if user_id in await self.get_member_ids(chat_id):
            raise ConstraintViolation("User is already a member of this chat")
        member = ChatMember(id=new_id(), chat_id=chat_id, user_id=user_id)
        self.tables.chat_members[member.id] = member
        return replace(member)

    async def get_memberships(self, user_id: str) -> list[ChatMember]:
        return [
            replace(member, chat=replace(self.tables.chats[member.chat_id]))
            for member in self.tables.chat_members.values()
            if member.user_id == user_id and member.chat_id in self.tables.chats
        ]

    async def get_member_ids(self, chat_id: str) -> list[str]:
        return [m.user_id for m in self.tables.chat_members.values() if m.chat_id == chat_id]

    async def get_other_member(self, chat_id: str, user_id: str) -> User | None:
        for member_id in await self.get_member_ids(chat_id):
            if member_id != user_id and member_id in self.tables.users:
                return replace(self.tables.users[member_id])
        return None

    async def find_direct_chat(self, user_id: str, other_user_id: str) -> Chat | None:
        wanted = {user_id, other_user_id}
        for chat in self.tables.chats.values():
            if chat.is_group:
                continue
            if set(await self.get_member_ids(chat.id)) == wanted:
                return replace(chat)
        return None


class MemoryMessageGateway(IMessageGateway):
    def __init__(self, tables: MemoryTables):
        self.tables = tables

    def _with_relations(self, message: Message) -> Message:
        sender = self.tables.users.get(message.sender_id)
        reactions = sorted(
            (r for r in self.tables.reactions.values() if r.message_id == message.id),
            key=lambda r: r.created_at,
        )
        return replace(
            message,
            sender=replace(sender) if sender else None,
            reactions=[replace(r) for r in reactions],
        )

    async def get_message(self, message_id: str) -> Message | None:
        message = self.tables.messages.get(message_id)
        return replace(message) if message else None

    async def create_message(self, message: Message) -> Message:
        self.tables.messages[message.id] = replace(message, sender=None, reactions=[])
        return replace(message)

    async def list_messages(self, chat_id: str) -> list[Message]:
        messages = [m for m in self.tables.messages.values() if m.chat_id == chat_id]
        messages.sort(key=lambda m: m.created_at)
        return [self._with_relations(m) for m in messages]

    async def latest_messages(self, chat_ids: list[str]) -> list[Message]:
        wanted = set(chat_ids)
        messages = [m for m in self.tables.messages.values() if m.chat_id in wanted]
        messages.sort(key=lambda m: m.created_at, reverse=True)
        return [replace(m) for m in messages]


class MemoryReactionGateway(IReactionGateway):
    def __init__(self, tables: MemoryTables):
        self.tables = tables

    async def find(self, message_id: str, user_id: str, emoji: str) -> Reaction | None:
        for reaction in self.tables.reactions.values():
            if (reaction.message_id, reaction.user_id, reaction.emoji) == (message_id, user_id, emoji):
                return replace(reaction)
        return None

    async def add(self, reaction: Reaction) -> Reaction:
        if await self.find(reaction.message_id, reaction.user_id, reaction.emoji):
            raise ConstraintViolation("Reaction already exists")
        self.tables.reactions[reaction.id] = replace(reaction)
        return replace(reaction)

    async def remove(self, reaction_id: str) -> bool:
        return self.tables.reactions.pop(reaction_id, None) is not None


class MemoryFriendRequestGateway(IFriendRequestGateway):
    def __init__(self, tables: MemoryTables):
        self.tables = tables

    async def get(self, request_id: str) -> FriendRequest | None:
        request = self.tables.friend_requests.get(request_id)
        return replace(request) if request else None

    async def get_by_pair(self, sender_id: str, receiver_id: str) -> FriendRequest | None:
        for request in self.tables.friend_requests.values():
            if request.sender_id == sender_id and request.receiver_id == receiver_id:
                return replace(request)
        return None

    async def create(self, request: FriendRequest) -> FriendRequest:
        if await self.get_by_pair(request.sender_id, request.receiver_id):
            raise ConstraintViolation("Friend request already exists")
        self.tables.friend_requests[request.id] = replace(request)
        return replace(request)

    async def list_for_user(self, user_id: str) -> list[FriendRequest]:
        return [
            replace(r)
            for r in self.tables.friend_requests.values()
            if user_id in (r.sender_id, r.receiver_id)
        ]

    async def list_pending(self, user_id: str) -> list[FriendRequest]:
        pending = []
        for request in self.tables.friend_requests.values():
            if request.receiver_id == user_id and request.status == FriendRequestStatus.PENDING:
                sender = self.tables.users.get(request.sender_id)
                pending.append(replace(request, sender=replace(sender) if sender else None))
        return pending

    async def update_status(
        self, request_id: str, status: FriendRequestStatus
    ) -> FriendRequest | None:
        request = self.tables.friend_requests.get(request_id)
        if request is None:
            return None
        request.status = status
        request.updated_at = utcnow()
        return replace(request)


class MemorySessionGateway(ISessionGateway):
    def __init__(self, tables: MemoryTables):
        self.tables = tables

    async def create_session(self, session: Session) -> Session:
        # one live session per user, as with the database backing
        for existing in list(self.tables.sessions.values()):
            if existing.user_id == session.user_id:
                del self.tables.sessions[existing.id]
        self.tables.sessions[session.id] = replace(session)
        return replace(session)

    async def get_by_access_token(self, access_token: str) -> Session | None:
        session = next(
            (s for s in self.tables.sessions.values() if s.access_token == access_token), None
        )
        return replace(session) if session else None

    async def get_by_refresh_token(self, refresh_token: str) -> Session | None:
        session = next(
            (s for s in self.tables.sessions.values() if s.refresh_token == refresh_token), None
        )
        return replace(session) if session else None

    async def delete_by_access_token(self, access_token: str) -> bool:
        session = await self.get_by_access_token(access_token)
        if session:
            del self.tables.sessions[session.id]
            return True
        return False

    async def delete_by_refresh_token(self, refresh_token: str) -> bool:
        session = await self.get_by_refresh_token(refresh_token)
        if session:
            del self.tables.sessions[session.id]
            return True
        return False


class MemoryStore(IDataStore):
    """In-memory backing; writes apply immediately, so commit/rollback are no-ops."""

    def __init__(self, tables: MemoryTables):
        self.tables = tables
        self.users = MemoryUserGateway(tables)
        self.chats = MemoryChatGateway(tables)
        self.messages = MemoryMessageGateway(tables)
        self.reactions = MemoryReactionGateway(tables)
        self.friend_requests = MemoryFriendRequestGateway(tables)
        self.sessions = MemorySessionGateway(tables)

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass

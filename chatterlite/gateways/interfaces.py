# chatterlite/gateways/interfaces.py
from abc import ABC, abstractmethod
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
)


class IUserGateway(ABC):
    @abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        pass

    @abstractmethod
    async def get_users(self, user_ids: list[str]) -> list[User]:
        pass

    @abstractmethod
    async def create_user(self, user: User) -> User:
        pass

    @abstractmethod
    async def update_user(self, user_id: str, changes: dict[str, Any]) -> User | None:
        pass

    @abstractmethod
    async def search_users(self, query: str) -> list[User]:
        pass


class IChatGateway(ABC):
    @abstractmethod
    async def get_chat(self, chat_id: str) -> Chat | None:
        pass

    @abstractmethod
    async def create_chat(self, chat: Chat) -> Chat:
        pass

    @abstractmethod
    async def add_member(self, chat_id: str, user_id: str) -> ChatMember:
        pass

    @abstractmethod
    async def get_memberships(self, user_id: str) -> list[ChatMember]:
        """Memberships of ``user_id``, each carrying its parent ``chat``."""

    @abstractmethod
    async def get_member_ids(self, chat_id: str) -> list[str]:
        pass

    @abstractmethod
    async def get_other_member(self, chat_id: str, user_id: str) -> User | None:
        """First member of the chat that is not ``user_id``."""

    @abstractmethod
    async def find_direct_chat(self, user_id: str, other_user_id: str) -> Chat | None:
        pass


class IMessageGateway(ABC):
    @abstractmethod
    async def get_message(self, message_id: str) -> Message | None:
        pass

    @abstractmethod
    async def create_message(self, message: Message) -> Message:
        pass

    @abstractmethod
    async def list_messages(self, chat_id: str) -> list[Message]:
        """Messages oldest first, each with ``sender`` and ``reactions`` loaded."""

    @abstractmethod
    async def latest_messages(self, chat_ids: list[str]) -> list[Message]:
        """Messages of all given chats, newest first."""


class IReactionGateway(ABC):
    @abstractmethod
    async def find(self, message_id: str, user_id: str, emoji: str) -> Reaction | None:
        pass

    @abstractmethod
    async def add(self, reaction: Reaction) -> Reaction:
        pass

    @abstractmethod
    async def remove(self, reaction_id: str) -> bool:
        pass


class IFriendRequestGateway(ABC):
    @abstractmethod
    async def get(self, request_id: str) -> FriendRequest | None:
        pass

    @abstractmethod
    async def get_by_pair(self, sender_id: str, receiver_id: str) -> FriendRequest | None:
        pass

    @abstractmethod
    async def create(self, request: FriendRequest) -> FriendRequest:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[FriendRequest]:
        pass

    @abstractmethod
    async def list_pending(self, user_id: str) -> list[FriendRequest]:
        """Pending requests received by ``user_id``, each with ``sender`` loaded."""

    @abstractmethod
    async def update_status(
        self, request_id: str, status: FriendRequestStatus
    ) -> FriendRequest | None:
        pass


class ISessionGateway(ABC):
    @abstractmethod
    async def create_session(self, session: Session) -> Session:
        pass

    @abstractmethod
    async def get_by_access_token(self, access_token: str) -> Session | None:
        pass

    @abstractmethod
    async def get_by_refresh_token(self, refresh_token: str) -> Session | None:
        pass

    @abstractmethod
    async def delete_by_access_token(self, access_token: str) -> bool:
        pass

    @abstractmethod
    async def delete_by_refresh_token(self, refresh_token: str) -> bool:
        pass


class IDataStore(ABC):
    """The gateways of one backing store, sharing one transaction scope."""

    users: IUserGateway
    chats: IChatGateway
    messages: IMessageGateway
    reactions: IReactionGateway
    friend_requests: IFriendRequestGateway
    sessions: ISessionGateway

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

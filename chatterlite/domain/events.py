# chatterlite/domain/events.py
from dataclasses import fields
from typing import Any, ClassVar, Literal

from pydantic import BaseModel

ChangeType = Literal["INSERT", "UPDATE", "DELETE"]


class Event(BaseModel):
    pass


class RowChanged(Event):
    """A committed row change, as delivered to change-notification subscribers."""

    table: ClassVar[str] = ""

    event: ChangeType
    record: dict[str, Any]

    def matches(self, column: str, value: Any) -> bool:
        return self.record.get(column) == value


class MessageChanged(RowChanged):
    table: ClassVar[str] = "messages"


class ChatChanged(RowChanged):
    table: ClassVar[str] = "chats"


class ChatMemberChanged(RowChanged):
    table: ClassVar[str] = "chat_members"


class ReactionChanged(RowChanged):
    table: ClassVar[str] = "message_reactions"


class FriendRequestChanged(RowChanged):
    table: ClassVar[str] = "friend_requests"


class UserChanged(RowChanged):
    table: ClassVar[str] = "users"


ROW_EVENT_TYPES: tuple[type[RowChanged], ...] = (
    MessageChanged,
    ChatChanged,
    ChatMemberChanged,
    ReactionChanged,
    FriendRequestChanged,
    UserChanged,
)


_NON_COLUMN_FIELDS = {"sender", "reactions", "chat", "user", "hashed_password"}


def row_record(entity: Any) -> dict[str, Any]:
    """Column values of an entity, as a change notification carries them."""
    return {
        f.name: getattr(entity, f.name)
        for f in fields(entity)
        if f.name not in _NON_COLUMN_FIELDS
    }

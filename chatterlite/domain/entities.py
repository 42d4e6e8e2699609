# chatterlite/domain/entities.py
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


class MessageKind(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"
    VOICE = "voice"


class FriendRequestStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class User:
    id: str
    email: str
    full_name: str
    avatar_url: str | None = None
    is_online: bool = False
    last_seen: datetime = field(default_factory=utcnow)
    created_at: datetime = field(default_factory=utcnow)
    hashed_password: str | None = None


@dataclass
class Chat:
    id: str
    name: str | None = None
    is_group: bool = False
    avatar_url: str | None = None
    created_by: str | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class ChatMember:
    id: str
    chat_id: str
    user_id: str
    joined_at: datetime = field(default_factory=utcnow)
    chat: Chat | None = None
    user: User | None = None


@dataclass
class Message:
    id: str
    chat_id: str
    sender_id: str
    content: str | None = None
    message_type: MessageKind = MessageKind.TEXT
    file_url: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    reply_to_id: str | None = None
    is_read: bool = False
    is_delivered: bool = False
    created_at: datetime = field(default_factory=utcnow)
    sender: User | None = None
    reactions: list["Reaction"] = field(default_factory=list)


@dataclass
class Reaction:
    id: str
    message_id: str
    user_id: str
    emoji: str
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class FriendRequest:
    id: str
    sender_id: str
    receiver_id: str
    status: FriendRequestStatus = FriendRequestStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    sender: User | None = None


@dataclass
class Session:
    id: str
    user_id: str
    access_token: str
    refresh_token: str
    token_type: str
    expires_at: datetime

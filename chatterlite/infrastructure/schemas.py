# chatterlite/infrastructure/schemas.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake case in Python, camelCase on the wire; both accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class User(CamelModel):
    id: str
    email: str
    full_name: str
    avatar_url: str | None = None
    is_online: bool = False
    last_seen: datetime | None = None
    created_at: datetime | None = None


class UserSync(CamelModel):
    id: str | None = None
    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None


class UserUpdate(CamelModel):
    full_name: str | None = None
    avatar_url: str | None = None


class SenderInfo(CamelModel):
    id: str
    full_name: str
    avatar_url: str | None = None


class ReactionSummary(CamelModel):
    emoji: str
    count: int
    users: list[str] = Field(default_factory=list)


class Message(CamelModel):
    id: str
    chat_id: str
    sender_id: str
    content: str | None = None
    message_type: str
    file_url: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    reply_to_id: str | None = None
    is_read: bool = False
    is_delivered: bool = False
    created_at: datetime
    sender: SenderInfo | None = None
    reactions: list[ReactionSummary] = Field(default_factory=list)


class MessageCreate(CamelModel):
    content: str | None = None
    reply_to_id: str | None = None


class AttachmentResponse(CamelModel):
    url: str


class ReactionToggle(CamelModel):
    emoji: str | None = None


class ReactionToggleResult(CamelModel):
    message_id: str
    emoji: str
    reacted: bool


class Chat(CamelModel):
    id: str
    name: str | None = None
    is_group: bool = False
    avatar_url: str | None = None
    created_by: str | None = None
    created_at: datetime


class ChatCreate(CamelModel):
    member_ids: list[str] = Field(default_factory=list)
    name: str | None = None
    is_group: bool = False


class ChatMemberAdd(CamelModel):
    user_id: str


class ChatSummary(CamelModel):
    id: str
    name: str
    is_group: bool = False
    avatar_url: str | None = None
    last_message: str | None = None
    last_message_time: datetime | None = None
    created_at: datetime | None = None
    unread_count: int = 0


class FriendRequestCreate(CamelModel):
    sender_id: str | None = None
    receiver_id: str | None = None


class FriendRequestUpdate(CamelModel):
    status: str | None = None


class FriendRequest(CamelModel):
    id: str
    sender_id: str
    receiver_id: str
    status: str
    created_at: datetime
    updated_at: datetime
    sender: User | None = None


class SignUpRequest(CamelModel):
    email: EmailStr | None = None
    password: str | None = None
    full_name: str | None = None


class SignInRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class RefreshTokenRequest(CamelModel):
    refresh_token: str


class SessionResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str
    expires_at: datetime
    user: User

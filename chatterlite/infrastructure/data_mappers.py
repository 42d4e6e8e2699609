# chatterlite/infrastructure/data_mappers.py
from datetime import UTC, datetime
from typing import Protocol, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from chatterlite.domain import entities
from chatterlite.infrastructure import models

ModelT_contra = TypeVar("ModelT_contra", contravariant=True)


def aware(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class DataMapper(Protocol[ModelT_contra]):
    async def insert(self, model: ModelT_contra):
        raise NotImplementedError

    async def delete(self, model: ModelT_contra):
        raise NotImplementedError

    async def update(self, model: ModelT_contra):
        raise NotImplementedError


class SessionMapper:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, model):
        self.session.add(model)
        await self.session.flush()

    async def delete(self, model):
        await self.session.delete(model)
        await self.session.flush()

    async def update(self, model):
        await self.session.merge(model)
        await self.session.flush()


class UserMapper(SessionMapper, DataMapper[models.User]):
    @staticmethod
    def to_entity(model: models.User) -> entities.User:
        return entities.User(
            id=model.id,
            email=model.email,
            full_name=model.full_name,
            avatar_url=model.avatar_url,
            is_online=bool(model.is_online),
            last_seen=aware(model.last_seen),
            created_at=aware(model.created_at),
            hashed_password=model.hashed_password,
        )


class ChatMapper(SessionMapper, DataMapper[models.Chat]):
    @staticmethod
    def to_entity(model: models.Chat) -> entities.Chat:
        return entities.Chat(
            id=model.id,
            name=model.name,
            is_group=bool(model.is_group),
            avatar_url=model.avatar_url,
            created_by=model.created_by,
            created_at=aware(model.created_at),
        )


class ChatMemberMapper(SessionMapper, DataMapper[models.ChatMember]):
    @staticmethod
    def to_entity(model: models.ChatMember, with_chat: bool = False) -> entities.ChatMember:
        return entities.ChatMember(
            id=model.id,
            chat_id=model.chat_id,
            user_id=model.user_id,
            joined_at=aware(model.joined_at),
            chat=ChatMapper.to_entity(model.chat) if with_chat else None,
        )


class ReactionMapper(SessionMapper, DataMapper[models.MessageReaction]):
    @staticmethod
    def to_entity(model: models.MessageReaction) -> entities.Reaction:
        return entities.Reaction(
            id=model.id,
            message_id=model.message_id,
            user_id=model.user_id,
            emoji=model.emoji,
            created_at=aware(model.created_at),
        )


class MessageMapper(SessionMapper, DataMapper[models.Message]):
    @staticmethod
    def to_entity(model: models.Message, with_relations: bool = False) -> entities.Message:
        message = entities.Message(
            id=model.id,
            chat_id=model.chat_id,
            sender_id=model.sender_id,
            content=model.content,
            message_type=entities.MessageKind(model.message_type),
            file_url=model.file_url,
            file_name=model.file_name,
            file_size=model.file_size,
            reply_to_id=model.reply_to_id,
            is_read=bool(model.is_read),
            is_delivered=bool(model.is_delivered),
            created_at=aware(model.created_at),
        )
        if with_relations:
            message.sender = UserMapper.to_entity(model.sender) if model.sender else None
            message.reactions = [ReactionMapper.to_entity(r) for r in model.reactions]
        return message


class FriendRequestMapper(SessionMapper, DataMapper[models.FriendRequest]):
    @staticmethod
    def to_entity(model: models.FriendRequest, with_sender: bool = False) -> entities.FriendRequest:
        request = entities.FriendRequest(
            id=model.id,
            sender_id=model.sender_id,
            receiver_id=model.receiver_id,
            status=entities.FriendRequestStatus(model.status),
            created_at=aware(model.created_at),
            updated_at=aware(model.updated_at),
        )
        if with_sender and model.sender is not None:
            request.sender = UserMapper.to_entity(model.sender)
        return request


class TokenMapper(SessionMapper, DataMapper[models.Token]):
    @staticmethod
    def to_entity(model: models.Token) -> entities.Session:
        return entities.Session(
            id=model.id,
            user_id=model.user_id,
            access_token=model.access_token,
            refresh_token=model.refresh_token,
            token_type=model.token_type,
            expires_at=aware(model.expires_at),
        )

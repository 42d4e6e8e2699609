# chatterlite/gateways/chat_gateway.py
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chatterlite.domain import entities
from chatterlite.gateways.interfaces import IChatGateway
from chatterlite.infrastructure import models
from chatterlite.infrastructure.data_mappers import ChatMapper, ChatMemberMapper, UserMapper
from chatterlite.infrastructure.uow import UnitOfWork


class ChatGateway(IChatGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.Chat] = ChatMapper(session)
        uow.mappers[models.ChatMember] = ChatMemberMapper(session)

    async def get_chat(self, chat_id: str) -> entities.Chat | None:
        stmt = select(models.Chat).filter(models.Chat.id == chat_id)
        result = await self.session.execute(stmt)
        chat = result.scalar_one_or_none()
        return ChatMapper.to_entity(chat) if chat else None

    async def create_chat(self, chat: entities.Chat) -> entities.Chat:
        db_chat = models.Chat(
            id=chat.id,
            name=chat.name,
            is_group=chat.is_group,
            avatar_url=chat.avatar_url,
            created_by=chat.created_by,
            created_at=chat.created_at,
        )
        self.uow.register_new(db_chat)
        await self.uow.commit()
        return ChatMapper.to_entity(db_chat)

    async def add_member(self, chat_id: str, user_id: str) -> entities.ChatMember:
        member = models.ChatMember(chat_id=chat_id, user_id=user_id)
        self.uow.register_new(member)
        await self.uow.commit()
        return ChatMemberMapper.to_entity(member)

    async def get_memberships(self, user_id: str) -> list[entities.ChatMember]:
        stmt = (
            select(models.ChatMember)
            .join(models.Chat)
            .filter(models.ChatMember.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        return [
            ChatMemberMapper.to_entity(member, with_chat=True)
            for member in result.unique().scalars().all()
        ]

    async def get_member_ids(self, chat_id: str) -> list[str]:
        stmt = (
            select(models.ChatMember.user_id)
            .filter(models.ChatMember.chat_id == chat_id)
            .order_by(models.ChatMember.joined_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_other_member(self, chat_id: str, user_id: str) -> entities.User | None:
        stmt = (
            select(models.User)
            .join(models.ChatMember, models.ChatMember.user_id == models.User.id)
            .filter(models.ChatMember.chat_id == chat_id, models.ChatMember.user_id != user_id)
            .order_by(models.ChatMember.joined_at)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        user = result.unique().scalar_one_or_none()
        return UserMapper.to_entity(user) if user else None

    async def find_direct_chat(
        self, user_id: str, other_user_id: str
    ) -> entities.Chat | None:
        pair = [user_id, other_user_id]
        stmt = (
            select(models.Chat)
            .join(models.ChatMember)
            .filter(models.Chat.is_group.is_(False))
            .group_by(models.Chat.id)
            .having(
                func.count(models.ChatMember.id) == 2,
                func.sum(case((models.ChatMember.user_id.in_(pair), 1), else_=0)) == 2,
            )
        )
        result = await self.session.execute(stmt)
        chat = result.scalars().first()
        return ChatMapper.to_entity(chat) if chat else None

# chatterlite/gateways/message_gateway.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from chatterlite.domain import entities
from chatterlite.gateways.interfaces import IMessageGateway
from chatterlite.infrastructure import models
from chatterlite.infrastructure.data_mappers import MessageMapper
from chatterlite.infrastructure.uow import UnitOfWork


class MessageGateway(IMessageGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.Message] = MessageMapper(session)

    async def get_message(self, message_id: str) -> entities.Message | None:
        stmt = select(models.Message).filter(models.Message.id == message_id)
        result = await self.session.execute(stmt)
        message = result.unique().scalar_one_or_none()
        return MessageMapper.to_entity(message) if message else None

    async def create_message(self, message: entities.Message) -> entities.Message:
        db_message = models.Message(
            id=message.id,
            chat_id=message.chat_id,
            sender_id=message.sender_id,
            content=message.content,
            message_type=str(message.message_type),
            file_url=message.file_url,
            file_name=message.file_name,
            file_size=message.file_size,
            reply_to_id=message.reply_to_id,
            is_read=message.is_read,
            is_delivered=message.is_delivered,
            created_at=message.created_at,
        )
        self.uow.register_new(db_message)
        await self.uow.commit()
        return MessageMapper.to_entity(db_message)

    async def list_messages(self, chat_id: str) -> list[entities.Message]:
        stmt = (
            select(models.Message)
            .options(selectinload(models.Message.reactions))
            .filter(models.Message.chat_id == chat_id)
            .order_by(models.Message.created_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return [
            MessageMapper.to_entity(message, with_relations=True)
            for message in result.unique().scalars().all()
        ]

    async def latest_messages(self, chat_ids: list[str]) -> list[entities.Message]:
        if not chat_ids:
            return []
        stmt = (
            select(models.Message)
            .filter(models.Message.chat_id.in_(chat_ids))
            .order_by(models.Message.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [MessageMapper.to_entity(message) for message in result.unique().scalars().all()]

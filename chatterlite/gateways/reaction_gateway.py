# chatterlite/gateways/reaction_gateway.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chatterlite.domain import entities
from chatterlite.gateways.interfaces import IReactionGateway
from chatterlite.infrastructure import models
from chatterlite.infrastructure.data_mappers import ReactionMapper
from chatterlite.infrastructure.uow import UnitOfWork


class ReactionGateway(IReactionGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.MessageReaction] = ReactionMapper(session)

    async def _find_model(
        self, message_id: str, user_id: str, emoji: str
    ) -> models.MessageReaction | None:
        stmt = select(models.MessageReaction).filter(
            models.MessageReaction.message_id == message_id,
            models.MessageReaction.user_id == user_id,
            models.MessageReaction.emoji == emoji,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find(self, message_id: str, user_id: str, emoji: str) -> entities.Reaction | None:
        reaction = await self._find_model(message_id, user_id, emoji)
        return ReactionMapper.to_entity(reaction) if reaction else None

    async def add(self, reaction: entities.Reaction) -> entities.Reaction:
        db_reaction = models.MessageReaction(
            id=reaction.id,
            message_id=reaction.message_id,
            user_id=reaction.user_id,
            emoji=reaction.emoji,
            created_at=reaction.created_at,
        )
        self.uow.register_new(db_reaction)
        await self.uow.commit()
        return ReactionMapper.to_entity(db_reaction)

    async def remove(self, reaction_id: str) -> bool:
        reaction = await self.session.get(models.MessageReaction, reaction_id)
        if not reaction:
            return False
        self.uow.register_deleted(reaction)
        await self.uow.commit()
        return True

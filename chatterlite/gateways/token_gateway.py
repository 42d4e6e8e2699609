# chatterlite/gateways/token_gateway.py
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chatterlite.domain import entities
from chatterlite.gateways.interfaces import ISessionGateway
from chatterlite.infrastructure import models
from chatterlite.infrastructure.data_mappers import TokenMapper
from chatterlite.infrastructure.uow import UnitOfWork, UoWModel


class TokenGateway(ISessionGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.Token] = TokenMapper(session)

    async def _find(self, column, value: str) -> Optional[models.Token]:
        stmt = select(models.Token).filter(column == value)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_session(self, session: entities.Session) -> entities.Session:
        # One live token row per user: a new sign-in replaces the previous one
        existing = await self._find(models.Token.user_id, session.user_id)
        if existing:
            token = UoWModel(existing, self.uow)
            token.access_token = session.access_token
            token.refresh_token = session.refresh_token
            token.expires_at = session.expires_at
            await self.uow.commit()
            return TokenMapper.to_entity(existing)

        db_token = models.Token(
            id=session.id,
            user_id=session.user_id,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            token_type=session.token_type,
            expires_at=session.expires_at,
        )
        self.uow.register_new(db_token)
        await self.uow.commit()
        return TokenMapper.to_entity(db_token)

    async def get_by_access_token(self, access_token: str) -> Optional[entities.Session]:
        token = await self._find(models.Token.access_token, access_token)
        return TokenMapper.to_entity(token) if token else None

    async def get_by_refresh_token(self, refresh_token: str) -> Optional[entities.Session]:
        token = await self._find(models.Token.refresh_token, refresh_token)
        return TokenMapper.to_entity(token) if token else None

    async def delete_by_access_token(self, access_token: str) -> bool:
        token = await self._find(models.Token.access_token, access_token)
        if token:
            self.uow.register_deleted(token)
            await self.uow.commit()
            return True
        return False

    async def delete_by_refresh_token(self, refresh_token: str) -> bool:
        token = await self._find(models.Token.refresh_token, refresh_token)
        if token:
            self.uow.register_deleted(token)
            await self.uow.commit()
            return True
        return False

# chatterlite/gateways/user_gateway.py
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chatterlite.domain import entities
from chatterlite.gateways.interfaces import IUserGateway
from chatterlite.infrastructure import models
from chatterlite.infrastructure.data_mappers import UserMapper
from chatterlite.infrastructure.uow import UnitOfWork, UoWModel


class UserGateway(IUserGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.User] = UserMapper(session)

    async def _get_model(self, user_id: str) -> models.User | None:
        stmt = select(models.User).filter(models.User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user(self, user_id: str) -> entities.User | None:
        user = await self._get_model(user_id)
        return UserMapper.to_entity(user) if user else None

    async def get_by_email(self, email: str) -> entities.User | None:
        stmt = select(models.User).filter(func.lower(models.User.email) == email.lower())
        result = await self.session.execute(stmt)
        user = result.scalar_one_or_none()
        return UserMapper.to_entity(user) if user else None

    async def get_users(self, user_ids: list[str]) -> list[entities.User]:
        if not user_ids:
            return []
        stmt = select(models.User).filter(models.User.id.in_(user_ids))
        result = await self.session.execute(stmt)
        return [UserMapper.to_entity(user) for user in result.scalars().all()]

    async def create_user(self, user: entities.User) -> entities.User:
        db_user = models.User(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            avatar_url=user.avatar_url,
            is_online=user.is_online,
            last_seen=user.last_seen,
            created_at=user.created_at,
            hashed_password=user.hashed_password,
        )
        self.uow.register_new(db_user)
        await self.uow.commit()
        return UserMapper.to_entity(db_user)

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> entities.User | None:
        user = await self._get_model(user_id)
        if not user:
            return None
        uow_user = UoWModel(user, self.uow)
        for key, value in changes.items():
            setattr(uow_user, key, value)
        await self.uow.commit()
        return UserMapper.to_entity(user)

    async def search_users(self, query: str) -> list[entities.User]:
        pattern = f"%{query}%"
        stmt = select(models.User).filter(
            or_(models.User.email.ilike(pattern), models.User.full_name.ilike(pattern))
        )
        result = await self.session.execute(stmt)
        return [UserMapper.to_entity(user) for user in result.scalars().all()]

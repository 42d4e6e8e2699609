# chatterlite/gateways/friend_request_gateway.py
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chatterlite.domain import entities
from chatterlite.gateways.interfaces import IFriendRequestGateway
from chatterlite.infrastructure import models
from chatterlite.infrastructure.data_mappers import FriendRequestMapper
from chatterlite.infrastructure.uow import UnitOfWork, UoWModel


class FriendRequestGateway(IFriendRequestGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.FriendRequest] = FriendRequestMapper(session)

    async def _get_model(self, request_id: str) -> models.FriendRequest | None:
        stmt = select(models.FriendRequest).filter(models.FriendRequest.id == request_id)
        result = await self.session.execute(stmt)
        return result.unique().scalar_one_or_none()

    async def get(self, request_id: str) -> entities.FriendRequest | None:
        request = await self._get_model(request_id)
        return FriendRequestMapper.to_entity(request) if request else None

    async def get_by_pair(
        self, sender_id: str, receiver_id: str
    ) -> entities.FriendRequest | None:
        stmt = select(models.FriendRequest).filter(
            models.FriendRequest.sender_id == sender_id,
            models.FriendRequest.receiver_id == receiver_id,
        )
        result = await self.session.execute(stmt)
        request = result.unique().scalar_one_or_none()
        return FriendRequestMapper.to_entity(request) if request else None

    async def create(self, request: entities.FriendRequest) -> entities.FriendRequest:
        db_request = models.FriendRequest(
            id=request.id,
            sender_id=request.sender_id,
            receiver_id=request.receiver_id,
            status=str(request.status),
            created_at=request.created_at,
            updated_at=request.updated_at,
        )
        self.uow.register_new(db_request)
        await self.uow.commit()
        return FriendRequestMapper.to_entity(db_request)

    async def list_for_user(self, user_id: str) -> list[entities.FriendRequest]:
        stmt = select(models.FriendRequest).filter(
            or_(
                models.FriendRequest.sender_id == user_id,
                models.FriendRequest.receiver_id == user_id,
            )
        )
        result = await self.session.execute(stmt)
        return [FriendRequestMapper.to_entity(r) for r in result.unique().scalars().all()]

    async def list_pending(self, user_id: str) -> list[entities.FriendRequest]:
        stmt = (
            select(models.FriendRequest)
            .filter(
                models.FriendRequest.receiver_id == user_id,
                models.FriendRequest.status == str(entities.FriendRequestStatus.PENDING),
            )
            .order_by(models.FriendRequest.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [
            FriendRequestMapper.to_entity(r, with_sender=True)
            for r in result.unique().scalars().all()
        ]

    async def update_status(
        self, request_id: str, status: entities.FriendRequestStatus
    ) -> entities.FriendRequest | None:
        request = await self._get_model(request_id)
        if not request:
            return None
        uow_request = UoWModel(request, self.uow)
        uow_request.status = str(status)
        uow_request.updated_at = entities.utcnow()
        await self.uow.commit()
        return FriendRequestMapper.to_entity(request)

# chatterlite/infrastructure/store.py
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chatterlite.domain.errors import UpstreamError
from chatterlite.gateways.chat_gateway import ChatGateway
from chatterlite.gateways.friend_request_gateway import FriendRequestGateway
from chatterlite.gateways.interfaces import IDataStore
from chatterlite.gateways.memory_gateway import MemoryStore, MemoryTables
from chatterlite.gateways.message_gateway import MessageGateway
from chatterlite.gateways.reaction_gateway import ReactionGateway
from chatterlite.gateways.token_gateway import TokenGateway
from chatterlite.gateways.user_gateway import UserGateway
from chatterlite.infrastructure.database import Database
from chatterlite.infrastructure.uow import UnitOfWork


class SQLStore(IDataStore):
    def __init__(self, session: AsyncSession):
        self.session = session
        self.uow = UnitOfWork()
        self.users = UserGateway(session, self.uow)
        self.chats = ChatGateway(session, self.uow)
        self.messages = MessageGateway(session, self.uow)
        self.reactions = ReactionGateway(session, self.uow)
        self.friend_requests = FriendRequestGateway(session, self.uow)
        self.sessions = TokenGateway(session, self.uow)

    async def commit(self) -> None:
        await self.uow.commit()
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


class StoreProvider(ABC):
    """Hands out data stores scoped to one unit of work."""

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    @abstractmethod
    def session(self) -> AsyncIterator[IDataStore]:
        pass


class MemoryStoreProvider(StoreProvider):
    def __init__(self, tables: MemoryTables | None = None):
        self.tables = tables or MemoryTables()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[IDataStore]:
        yield MemoryStore(self.tables)


class DatabaseStoreProvider(StoreProvider):
    def __init__(self, database: Database):
        self.database = database

    async def connect(self) -> None:
        await self.database.connect()

    async def disconnect(self) -> None:
        await self.database.disconnect()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[IDataStore]:
        async with self.database.session() as session:
            store = SQLStore(session)
            try:
                yield store
                await store.commit()
            except SQLAlchemyError as e:
                await store.rollback()
                raise UpstreamError("Database request failed") from e
            except Exception:
                await store.rollback()
                raise

# chatterlite/infrastructure/database.py
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Database:
    """Async engine and session factory of the relational backing."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        self.engine = engine
        self.SessionLocal = session_factory or async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "Database":
        # aiosqlite connections are handed between pool threads
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        return cls(create_async_engine(url, echo=echo, connect_args=connect_args))

    async def connect(self) -> None:
        """Create missing tables; existing ones are left as they are."""
        async with self.engine.begin() as conn:
            import chatterlite.infrastructure.models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)

    async def disconnect(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.SessionLocal() as session:
            yield session

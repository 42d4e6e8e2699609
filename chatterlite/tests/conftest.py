# chatterlite/tests/conftest.py
import logging
import uuid

import pytest
from fakeredis import aioredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from chatterlite.config import AppConfig
from chatterlite.domain.events import ROW_EVENT_TYPES
from chatterlite.gateways.memory_gateway import MemoryStore, MemoryTables
from chatterlite.infrastructure.change_feed import ChangeFeed
from chatterlite.infrastructure.database import Base, Database
from chatterlite.infrastructure.event_dispatcher import EventDispatcher
from chatterlite.infrastructure.storage import LocalObjectStorage
from chatterlite.infrastructure.store import DatabaseStoreProvider, MemoryStoreProvider, SQLStore
from chatterlite.main import Application


@pytest.fixture(scope="function")
def app_config(tmp_path):
    """Test configuration: auth enabled, uploads in a temporary directory."""
    return AppConfig(
        _env_file=None,
        PROJECT_NAME="Test ChatterLite API",
        SECRET_KEY="test_secret_key",
        REFRESH_SECRET_KEY="test_refresh_secret_key",
        ALGORITHM="HS256",
        ACCESS_TOKEN_EXPIRE_MINUTES=30,
        REFRESH_TOKEN_EXPIRE_DAYS=7,
        STORE_BACKEND="memory",
        REDIS_HOST="localhost",
        REDIS_PORT=6379,
        STORAGE_ROOT=str(tmp_path / "uploads"),
        STORAGE_BUCKET="chat-files",
        STORAGE_PUBLIC_URL="/files",
        MAX_UPLOAD_SIZE=1024 * 1024,
    )


@pytest.fixture
def test_logger():
    logger = logging.getLogger("ChatterLite.tests")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture(scope="function")
async def mock_redis():
    """Provide a fake Redis client for testing."""
    redis = aioredis.FakeRedis()
    yield redis
    await redis.flushall()
    await redis.aclose()


@pytest.fixture(scope="function")
async def engine():
    """In-memory SQLite shared by every session through a single connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        from chatterlite.infrastructure import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine):
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    session = session_factory()
    yield session
    await session.close()


@pytest.fixture(params=["memory", "database"])
def store(request, db_session):
    """A data store on each backing."""
    if request.param == "memory":
        return MemoryStore(MemoryTables())
    return SQLStore(db_session)


@pytest.fixture(params=["memory", "database"])
def store_provider(request, engine):
    if request.param == "memory":
        return MemoryStoreProvider()
    return DatabaseStoreProvider(Database(engine))


@pytest.fixture
def change_feed(test_logger):
    return ChangeFeed(test_logger)


@pytest.fixture
def event_dispatcher(change_feed, test_logger):
    dispatcher = EventDispatcher(test_logger)
    for event_type in ROW_EVENT_TYPES:
        dispatcher.register(event_type.__name__, change_feed.publish)
    return dispatcher


@pytest.fixture
def storage(tmp_path):
    return LocalObjectStorage(tmp_path / "uploads", "chat-files", "/files", max_size=1024)


@pytest.fixture(scope="function")
async def app(app_config, store_provider, mock_redis):
    """The FastAPI app on the parametrized store backing, with Redis faked."""
    application = Application(config=app_config)
    application.store_provider = store_provider
    application.redis_client.client = mock_redis
    app_instance = application.create_app()
    yield app_instance
    await application.change_feed.drain()


@pytest.fixture(scope="function")
async def client(app):
    """Provide an HTTP client with the test app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sign_up(client):
    """Sign a new account up through the API; returns (user json, auth header)."""

    async def _sign_up(full_name: str, password: str = "testpassword"):
        email = f"{full_name.split()[0].lower()}_{uuid.uuid4().hex[:8]}@example.com"
        response = await client.post(
            "/api/auth/signup",
            json={"email": email, "password": password, "fullName": full_name},
        )
        assert response.status_code == 200, f"Sign-up failed: {response.json()}"
        data = response.json()
        return data["user"], {"Authorization": f"Bearer {data['accessToken']}"}

    return _sign_up


@pytest.fixture(scope="function")
async def alice(sign_up):
    return await sign_up("Alice Cooper")


@pytest.fixture(scope="function")
async def bob(sign_up):
    return await sign_up("Bob Johnson")

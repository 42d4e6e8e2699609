# chatterlite/tests/unit/test_redis_client.py
import json
import logging
from unittest.mock import AsyncMock, patch

import pytest
import redis

from chatterlite.domain.events import MessageChanged
from chatterlite.infrastructure.event_handlers import EventHandlers
from chatterlite.infrastructure.redis_client import RedisClient


@pytest.fixture
def redis_client(test_logger):
    return RedisClient(host="localhost", port=6379, logger=test_logger)


@pytest.mark.asyncio
async def test_redis_connect(redis_client, caplog):
    caplog.set_level(logging.INFO)
    with patch("redis.asyncio.Redis", return_value=AsyncMock()) as mock_redis:
        mock_redis.return_value.ping.return_value = True
        await redis_client.connect()
        assert redis_client.client is not None
        assert "Successfully connected to Redis at localhost:6379" in caplog.text


@pytest.mark.asyncio
async def test_redis_connect_failure(redis_client, caplog):
    with patch("redis.asyncio.Redis", return_value=AsyncMock()) as mock_redis:
        mock_redis.return_value.ping.side_effect = redis.ConnectionError("refused")
        with pytest.raises(redis.ConnectionError):
            await redis_client.connect()
    assert "Failed to connect to Redis" in caplog.text


@pytest.mark.asyncio
async def test_redis_not_configured(test_logger, caplog):
    caplog.set_level(logging.INFO)
    client = RedisClient(host=None, port=6379, logger=test_logger)
    await client.connect()
    assert client.client is None
    assert "Redis not configured" in caplog.text
    await client.disconnect()


@pytest.mark.asyncio
async def test_publish_requires_connection(redis_client):
    with pytest.raises(RuntimeError):
        await redis_client.publish("table:messages", "{}")


@pytest.mark.asyncio
async def test_publish_through_fake_redis(redis_client, mock_redis):
    redis_client.client = mock_redis
    pubsub = mock_redis.pubsub()
    await pubsub.subscribe("chat:c1")
    await pubsub.get_message(timeout=1)  # subscribe confirmation

    handlers = EventHandlers(redis_client)
    await handlers.publish_row_changed(
        MessageChanged(event="INSERT", record={"id": "m1", "chat_id": "c1"})
    )

    message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1)
    assert message is not None
    assert json.loads(message["data"])["record"]["id"] == "m1"
    await pubsub.aclose()

"""Tests for the Redis-backed key-value store"""
import pytest
from unittest.mock import AsyncMock, Mock

import storefront.db as db
from storefront.db import RedisStore


@pytest.fixture
def mock_redis():
    redis = Mock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value="OK")
    redis.delete = AsyncMock(return_value=1)
    return redis


@pytest.mark.asyncio
async def test_set_and_get_namespaced(mock_redis):
    """Test keys are prefixed with the namespace"""
    store = RedisStore(redis=mock_redis, namespace="device-42")
    mock_redis.get.return_value = '{"items": []}'

    await store.set("cart", '{"items": []}')
    value = await store.get("cart")

    mock_redis.set.assert_awaited_once_with("device-42:cart", '{"items": []}')
    mock_redis.get.assert_awaited_once_with("device-42:cart")
    assert value == '{"items": []}'


@pytest.mark.asyncio
async def test_get_missing_key(mock_redis):
    """Test absent keys come back as None"""
    store = RedisStore(redis=mock_redis)

    assert await store.get("userToken") is None
    mock_redis.get.assert_awaited_once_with("userToken")


@pytest.mark.asyncio
async def test_delete(mock_redis):
    """Test deleting a key."""
    store = RedisStore(redis=mock_redis)

    await store.delete("cart")

    mock_redis.delete.assert_awaited_once_with("cart")


def test_missing_credentials(monkeypatch):
    """Test a clear error when Upstash is not configured"""
    monkeypatch.setattr(db, "_redis_client", None)
    monkeypatch.setattr(db.config, "UPSTASH_REDIS_REST_URL", "")

    with pytest.raises(ValueError, match="Storage unavailable"):
        RedisStore().redis

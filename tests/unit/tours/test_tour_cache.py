"""Unit tests for tour catalogue cache backends."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from tour_campaign_optimizer.core.exceptions import CacheError
from tour_campaign_optimizer.tours.cache import InMemoryTourCache, RedisTourCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestInMemoryTourCache:
    @pytest.fixture
    def fake_clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, fake_clock):
        return InMemoryTourCache(clock=fake_clock)

    @pytest.mark.asyncio
    async def test_miss(self, cache):
        assert await cache.get("tours:catalogue") is None

    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, cache, fake_clock):
        await cache.set("tours:catalogue", {"night-tour": {}}, ttl=300)
        fake_clock.now += 299

        assert await cache.get("tours:catalogue") == {"night-tour": {}}

    @pytest.mark.asyncio
    async def test_expires_at_ttl(self, cache, fake_clock):
        await cache.set("tours:catalogue", {"night-tour": {}}, ttl=300)
        fake_clock.now += 300

        assert await cache.get("tours:catalogue") is None

    @pytest.mark.asyncio
    async def test_delete(self, cache):
        await cache.set("tours:catalogue", {}, ttl=300)

        assert await cache.delete("tours:catalogue") is True
        assert await cache.delete("tours:catalogue") is False


class TestRedisTourCache:
    @pytest.fixture
    def redis(self):
        return AsyncMock()

    @pytest.fixture
    def cache(self, redis):
        return RedisTourCache(redis, prefix="test")

    @pytest.mark.asyncio
    async def test_get_hit(self, cache, redis):
        redis.get.return_value = json.dumps({"night-tour": {"tour-price": 6500}}).encode()

        result = await cache.get("tours:catalogue")

        assert result == {"night-tour": {"tour-price": 6500}}
        redis.get.assert_awaited_once_with("test:tours:catalogue")

    @pytest.mark.asyncio
    async def test_get_miss(self, cache, redis):
        redis.get.return_value = None

        assert await cache.get("tours:catalogue") is None

    @pytest.mark.asyncio
    async def test_corrupted_entry_is_deleted(self, cache, redis):
        redis.get.return_value = b"{not json"

        assert await cache.get("tours:catalogue") is None
        redis.delete.assert_awaited_once_with("test:tours:catalogue")

    @pytest.mark.asyncio
    async def test_get_failure_raises_cache_error(self, cache, redis):
        redis.get.side_effect = ConnectionError("connection refused")

        with pytest.raises(CacheError, match="connection refused"):
            await cache.get("tours:catalogue")

    @pytest.mark.asyncio
    async def test_set_uses_setex(self, cache, redis):
        await cache.set("tours:catalogue", {"uji-tour": {"tour-price": 9000}}, ttl=60)

        redis.setex.assert_awaited_once_with(
            "test:tours:catalogue", 60, json.dumps({"uji-tour": {"tour-price": 9000}})
        )

    @pytest.mark.asyncio
    async def test_set_unserializable_value(self, cache, redis):
        with pytest.raises(CacheError, match="not JSON serializable"):
            await cache.set("tours:catalogue", {"tour": object()}, ttl=60)

        redis.setex.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_failure_raises_cache_error(self, cache, redis):
        redis.setex.side_effect = ConnectionError("timeout")

        with pytest.raises(CacheError):
            await cache.set("tours:catalogue", {}, ttl=60)

    @pytest.mark.asyncio
    async def test_delete(self, cache, redis):
        redis.delete.return_value = 1

        assert await cache.delete("tours:catalogue") is True
        redis.delete.assert_awaited_once_with("test:tours:catalogue")

    @pytest.mark.asyncio
    async def test_ping(self, cache, redis):
        assert await cache.ping() is True

        redis.ping.side_effect = ConnectionError("down")
        assert await cache.ping() is False

    @pytest.mark.asyncio
    async def test_close(self, cache, redis):
        await cache.close()

        redis.aclose.assert_awaited_once()

    def test_from_url(self):
        with patch("tour_campaign_optimizer.tours.cache.Redis") as redis_class:
            cache = RedisTourCache.from_url("redis://localhost:6379/0")

        redis_class.from_url.assert_called_once_with(
            "redis://localhost:6379/0", decode_responses=False
        )
        assert cache.redis is redis_class.from_url.return_value
        assert cache.prefix == "tco"

import pytest

from solchat.cache import TTLCache
from solchat.core.errors import UpstreamRejectedError, UpstreamTransientError
from solchat.core.retry import RetryConfig, retry_transient


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


# =============================================================================
# TTLCache
# =============================================================================

@pytest.mark.asyncio
async def test_cache_entries_expire():
    clock = FakeClock()
    cache = TTLCache(default_ttl=60, clock=clock)

    await cache.set("SOL", "value")
    clock.now += 59
    assert await cache.get("SOL") == "value"

    clock.now += 2
    assert await cache.get("SOL") is None
    assert cache.size() == 0


@pytest.mark.asyncio
async def test_cache_per_entry_ttl():
    clock = FakeClock()
    cache = TTLCache(default_ttl=60, clock=clock)

    await cache.set("short", 1, ttl=5)
    await cache.set("long", 2)
    clock.now += 10

    assert await cache.get("short") is None
    assert await cache.get("long") == 2


@pytest.mark.asyncio
async def test_cache_evicts_least_recently_used():
    cache = TTLCache(default_ttl=60, max_size=2, clock=FakeClock())

    await cache.set("a", 1)
    await cache.set("b", 2)
    await cache.get("a")
    await cache.set("c", 3)

    assert await cache.get("a") == 1
    assert await cache.get("b") is None
    assert await cache.get("c") == 3


@pytest.mark.asyncio
async def test_cache_clear():
    cache = TTLCache()
    await cache.set("a", 1)

    await cache.clear()

    assert cache.size() == 0


# =============================================================================
# retry_transient
# =============================================================================

NO_WAIT = RetryConfig(max_attempts=3, delay_seconds=0)


@pytest.mark.asyncio
async def test_retry_recovers_from_transient_errors():
    calls = []

    async def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise UpstreamTransientError("429 Too Many Requests", provider="jupiter", status_code=429)
        return "ok"

    assert await retry_transient(flaky, NO_WAIT) == "ok"
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_retry_gives_up_after_max_attempts():
    calls = []

    async def always_busy():
        calls.append(1)
        raise UpstreamTransientError("503", provider="jupiter", status_code=503)

    with pytest.raises(UpstreamTransientError):
        await retry_transient(always_busy, NO_WAIT)

    assert len(calls) == 3


@pytest.mark.asyncio
async def test_retry_never_repeats_rejections():
    calls = []

    async def rejected():
        calls.append(1)
        raise UpstreamRejectedError("Invalid order id", provider="jupiter_trigger", status_code=400)

    with pytest.raises(UpstreamRejectedError):
        await retry_transient(rejected, NO_WAIT)

    assert len(calls) == 1


def test_linear_backoff():
    config = RetryConfig(max_attempts=3, delay_seconds=1.0)

    assert [config.get_delay(attempt) for attempt in range(3)] == [1.0, 2.0, 3.0]

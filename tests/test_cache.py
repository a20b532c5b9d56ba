import asyncio

from wpstatic.cache import TimedCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_values_expire_after_ttl():
    clock = FakeClock()
    cache = TimedCache(ttl=10, clock=clock)
    cache.set("all-posts", [1, 2])
    clock.now += 9
    assert cache.get("all-posts") == [1, 2]
    clock.now += 1
    assert cache.get("all-posts") is None
    assert "all-posts" not in cache


def test_get_or_fetch_calls_fetcher_once():
    cache = TimedCache(ttl=60, clock=FakeClock())
    calls = []

    async def fetch():
        calls.append(1)
        return ["value"]

    async def run():
        return await cache.get_or_fetch("k", fetch), await cache.get_or_fetch("k", fetch)

    first, second = asyncio.run(run())
    assert first == second == ["value"]
    assert len(calls) == 1
    assert len(cache) == 1
    cache.clear()
    assert len(cache) == 0

# tests/test_cache.py
import asyncio

from crypto_dashboard.cache import ResponseCache, user_key, user_prefix
from crypto_dashboard.errors import UpstreamError
from crypto_dashboard.feeds import FeedAdapter, FeedContext, cached_fetch


class FakeClock:
    def __init__(self, t: float = 1000.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


class CountingAdapter(FeedAdapter):
    name = "counting"
    ttl = 30

    def __init__(self, fail: bool = False):
        self.calls = 0
        self.fail = fail

    async def fetch(self, ctx, client):
        self.calls += 1
        if self.fail:
            raise UpstreamError(self.name, "boom")
        return {"n": self.calls}

    def fallback(self, ctx):
        return {"n": 0}


def _fetch(cache, adapter, ctx=FeedContext(), refresh=False):
    return asyncio.run(cached_fetch(cache, adapter, ctx, client=None, refresh=refresh))


def test_get_before_and_after_expiry():
    clock = FakeClock()
    cache = ResponseCache(clock=clock)
    cache.put("k", {"v": 1}, ttl=60)
    clock.advance(59)
    assert cache.get("k") == {"v": 1}
    clock.advance(1)  # now == expiry is already stale
    assert cache.get("k") is None
    assert len(cache) == 0

def test_put_replaces_entry():
    cache = ResponseCache(clock=FakeClock())
    cache.put("k", {"v": 1}, ttl=60)
    cache.put("k", {"v": 2}, ttl=60)
    assert cache.get("k") == {"v": 2}

def test_invalidate_by_key_and_prefix():
    cache = ResponseCache(clock=FakeClock())
    cache.put(user_key(1, "prices"), {}, 60)
    cache.put(user_key(1, "news"), {}, 60)
    cache.put(user_key(11, "news"), {}, 60)
    cache.put("meme", {}, 60)

    assert cache.invalidate(user_prefix(1)) == 2
    assert user_key(11, "news") in cache
    assert cache.invalidate("meme") == 1
    assert cache.invalidate("missing") == 0

def test_reads_within_ttl_hit_the_cache():
    clock = FakeClock()
    cache = ResponseCache(clock=clock)
    adapter = CountingAdapter()

    first = _fetch(cache, adapter)
    clock.advance(10)
    second = _fetch(cache, adapter)

    assert adapter.calls == 1
    assert first.body() == second.body()
    assert second.cached and second.live

def test_read_after_ttl_refetches():
    clock = FakeClock()
    cache = ResponseCache(clock=clock)
    adapter = CountingAdapter()

    _fetch(cache, adapter)
    clock.advance(adapter.ttl)
    again = _fetch(cache, adapter)

    assert adapter.calls == 2
    assert again.payload == {"n": 2}
    assert not again.cached

def test_refresh_skips_get_but_still_stores():
    clock = FakeClock()
    cache = ResponseCache(clock=clock)
    adapter = CountingAdapter()

    _fetch(cache, adapter)
    forced = _fetch(cache, adapter, refresh=True)
    after = _fetch(cache, adapter)

    assert adapter.calls == 2
    assert forced.payload == {"n": 2}
    assert after.payload == {"n": 2} and after.cached

def test_fallback_is_tagged_and_not_cached():
    cache = ResponseCache(clock=FakeClock())
    adapter = CountingAdapter(fail=True)

    res = _fetch(cache, adapter)
    assert res.live is False
    assert res.payload == {"n": 0}
    assert res.body()["note"] == adapter.fallback_note
    assert "boom" in res.error

    _fetch(cache, adapter)
    assert adapter.calls == 2  # nothing cached, upstream tried again

def test_per_user_keys():
    adapter = CountingAdapter()
    adapter.per_user = True
    assert adapter.cache_key(FeedContext(user_id=7)) == "user:7:0:counting"
    assert adapter.cache_key(FeedContext(user_id=7, pref_id=3)) == "user:7:3:counting"
    assert adapter.cache_key(FeedContext()) == "counting"

def test_expired_entries_are_swept_on_put():
    clock = FakeClock()
    cache = ResponseCache(clock=clock, sweep_every=3)
    cache.put(user_key(1, "prices"), {}, 10)
    cache.put(user_key(2, "prices"), {}, 10)
    clock.advance(10)

    cache.put("meme", {}, 60)  # third put triggers the sweep
    assert len(cache) == 1
    assert "meme" in cache

def test_purge_expired_keeps_fresh_entries():
    clock = FakeClock()
    cache = ResponseCache(clock=clock)
    cache.put("old", {}, 5)
    cache.put("new", {}, 60)
    clock.advance(5)
    assert cache.purge_expired() == 1
    assert cache.get("new") == {}

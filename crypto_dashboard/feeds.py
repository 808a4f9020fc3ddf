# crypto_dashboard/feeds.py
"""
Adapter base for the third-party feeds (prices, news, meme, insight).

Every adapter has one `fetch` that talks to its upstream and raises on
anything unusable, and one `fallback` that always works. `run` glues the two
together and reports which one was served, so callers (and tests) can tell
live data from placeholder data without reading note strings.

`cached_fetch` puts the ResponseCache in front of an adapter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import httpx

from .cache import ResponseCache, user_key
from .errors import UpstreamError
from .logging_setup import get_logger

logger = get_logger("crypto_dashboard.feeds")

USER_AGENT = "CryptoDashboardBot/0.1 (+https://example.com)"


@dataclass(frozen=True)
class FeedContext:
    """What an adapter may know about the caller."""

    user_id: Optional[int] = None
    pref_id: Optional[int] = None
    assets: Tuple[str, ...] = ()
    archetype: Optional[str] = None
    content_types: Tuple[str, ...] = ()

    @property
    def has_preferences(self) -> bool:
        return self.pref_id is not None

    @classmethod
    def from_preferences(cls, user_id: Optional[int], prefs: Any) -> "FeedContext":
        if prefs is None:
            return cls(user_id=user_id)
        return cls(
            user_id=user_id,
            pref_id=prefs.id,
            assets=tuple(prefs.interested_assets or ()),
            archetype=prefs.investor_type,
            content_types=tuple(prefs.content_types or ()),
        )


@dataclass
class FeedResult:
    feed: str
    payload: Dict[str, Any]
    live: bool
    note: Optional[str] = None
    cached: bool = False
    error: Optional[str] = field(default=None, repr=False)

    def body(self) -> Dict[str, Any]:
        """JSON body for the route: the payload, plus `note` when degraded."""
        out = dict(self.payload)
        if self.note:
            out["note"] = self.note
        return out


class FeedAdapter:
    name = "base"
    ttl: float = 60
    per_user = False
    fallback_note = "Live data unavailable; showing placeholder content."

    async def fetch(self, ctx: FeedContext, client: httpx.AsyncClient) -> Dict[str, Any]:
        raise NotImplementedError

    def fallback(self, ctx: FeedContext) -> Dict[str, Any]:
        raise NotImplementedError

    def cache_key(self, ctx: FeedContext) -> str:
        if self.per_user and ctx.user_id is not None:
            return user_key(ctx.user_id, self.name, ctx.pref_id)
        return self.name

    async def run(self, ctx: FeedContext, client: httpx.AsyncClient) -> FeedResult:
        try:
            payload = await self.fetch(ctx, client)
            return FeedResult(feed=self.name, payload=payload, live=True)
        except Exception as e:
            # Upstream failures never reach the caller; serve the fallback instead
            reason = e.reason if isinstance(e, UpstreamError) else f"{type(e).__name__}: {e}"
            logger.warning("FEED_FALLBACK", extra={"feed": self.name, "error": reason})
            return FeedResult(
                feed=self.name,
                payload=self.fallback(ctx),
                live=False,
                note=self.fallback_note,
                error=reason,
            )


async def get_json(client: httpx.AsyncClient, feed: str, url: str, **kwargs) -> Any:
    """GET `url` and decode JSON, raising UpstreamError for transport, status or body problems."""
    try:
        r = await client.get(url, **kwargs)
    except httpx.TimeoutException:
        raise UpstreamError(feed, "timeout")
    except httpx.HTTPError as e:
        raise UpstreamError(feed, f"transport error ({type(e).__name__})")

    if r.status_code == 429:
        raise UpstreamError(feed, "rate-limited (429)")
    if r.status_code != 200:
        raise UpstreamError(feed, f"status {r.status_code}")
    try:
        return r.json()
    except ValueError:
        raise UpstreamError(feed, "response is not JSON")


async def cached_fetch(
    cache: ResponseCache,
    adapter: FeedAdapter,
    ctx: FeedContext,
    client: httpx.AsyncClient,
    refresh: bool = False,
) -> FeedResult:
    """
    Serve `adapter` through the cache.

    - a fresh entry is returned as-is unless `refresh` is set
    - live results are stored for `adapter.ttl` seconds
    - fallback results are not stored, so the next read tries the upstream again
    """
    key = adapter.cache_key(ctx)
    if not refresh:
        hit = cache.get(key)
        if hit is not None:
            logger.debug("CACHE_HIT", extra={"feed": adapter.name, "key": key})
            return FeedResult(feed=adapter.name, payload=hit, live=True, cached=True)

    result = await adapter.run(ctx, client)
    if result.live:
        cache.put(key, result.payload, adapter.ttl)
    return result

# crypto_dashboard/aggregate.py
"""
One dashboard load: all four feeds, fetched concurrently, each behind its own
cache entry and fallback. A slow or broken feed only degrades its own section.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Mapping

import httpx

from .cache import ResponseCache
from .feeds import FeedAdapter, FeedContext, FeedResult, cached_fetch
from .insight import InsightAdapter
from .logging_setup import get_logger
from .sources import MemeAdapter, NewsAdapter, PriceAdapter

logger = get_logger("crypto_dashboard.aggregate")

FEED_ORDER = ("prices", "news", "insight", "meme")


def build_adapters() -> Dict[str, FeedAdapter]:
    """Adapters wired from config; built once at startup."""
    return {
        "prices": PriceAdapter(),
        "news": NewsAdapter(),
        "insight": InsightAdapter(),
        "meme": MemeAdapter(),
    }


async def load_dashboard(
    ctx: FeedContext,
    adapters: Mapping[str, FeedAdapter],
    cache: ResponseCache,
    client: httpx.AsyncClient,
    refresh: bool = False,
) -> Dict[str, FeedResult]:
    t0 = time.perf_counter()
    names = [n for n in FEED_ORDER if n in adapters]
    # adapter.run already absorbs upstream failures, so gather never sees an exception from a feed
    results = await asyncio.gather(
        *(cached_fetch(cache, adapters[n], ctx, client, refresh=refresh) for n in names)
    )
    out = dict(zip(names, results))

    logger.info(
        "DASHBOARD_LOADED",
        extra={
            "user_id": ctx.user_id,
            "elapsed_ms": round((time.perf_counter() - t0) * 1000),
            "live": [n for n, r in out.items() if r.live],
            "fallback": [n for n, r in out.items() if not r.live],
            "cached": [n for n, r in out.items() if r.cached],
        },
    )
    return out


def dashboard_body(results: Mapping[str, FeedResult]) -> Dict[str, Any]:
    return {name: result.body() for name, result in results.items()}

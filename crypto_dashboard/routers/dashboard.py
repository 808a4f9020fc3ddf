# crypto_dashboard/routers/dashboard.py
"""
Feed routes. None of these fail because of an upstream: a broken provider
yields its fallback payload with a `note`, still as a 200.
"""

from typing import Dict

import httpx
from fastapi import APIRouter, Depends, Query

from ..aggregate import dashboard_body, load_dashboard
from ..cache import ResponseCache
from ..dependencies import feed_context, get_adapters, get_cache, http_client
from ..feeds import FeedAdapter, FeedContext, cached_fetch
from ..logging_setup import get_logger

logger = get_logger("crypto_dashboard.routes.dashboard")

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


async def _serve(feed: str, ctx: FeedContext, adapters: Dict[str, FeedAdapter],
                 cache: ResponseCache, client: httpx.AsyncClient, refresh: bool) -> dict:
    result = await cached_fetch(cache, adapters[feed], ctx, client, refresh=refresh)
    logger.info(f"Served {feed} for user={ctx.user_id} live={result.live} cached={result.cached}")
    return result.body()


@router.get("")
async def get_dashboard(
    refresh: bool = Query(False, description="Skip the cache and fetch fresh data"),
    ctx: FeedContext = Depends(feed_context),
    adapters: Dict[str, FeedAdapter] = Depends(get_adapters),
    cache: ResponseCache = Depends(get_cache),
    client: httpx.AsyncClient = Depends(http_client),
):
    """All four sections in one response: {prices, news, insight, meme}."""
    results = await load_dashboard(ctx, adapters, cache, client, refresh=refresh)
    return dashboard_body(results)


@router.get("/prices")
async def get_prices(
    refresh: bool = Query(False, description="Skip the cache and fetch fresh data"),
    ctx: FeedContext = Depends(feed_context),
    adapters: Dict[str, FeedAdapter] = Depends(get_adapters),
    cache: ResponseCache = Depends(get_cache),
    client: httpx.AsyncClient = Depends(http_client),
):
    return await _serve("prices", ctx, adapters, cache, client, refresh)


@router.get("/news")
async def get_news(
    refresh: bool = Query(False, description="Skip the cache and fetch fresh data"),
    ctx: FeedContext = Depends(feed_context),
    adapters: Dict[str, FeedAdapter] = Depends(get_adapters),
    cache: ResponseCache = Depends(get_cache),
    client: httpx.AsyncClient = Depends(http_client),
):
    return await _serve("news", ctx, adapters, cache, client, refresh)


@router.get("/insight")
async def get_insight(
    refresh: bool = Query(False, description="Skip the cache and fetch fresh data"),
    ctx: FeedContext = Depends(feed_context),
    adapters: Dict[str, FeedAdapter] = Depends(get_adapters),
    cache: ResponseCache = Depends(get_cache),
    client: httpx.AsyncClient = Depends(http_client),
):
    return await _serve("insight", ctx, adapters, cache, client, refresh)


@router.get("/meme")
async def get_meme(
    refresh: bool = Query(False, description="Skip the cache and fetch fresh data"),
    ctx: FeedContext = Depends(feed_context),
    adapters: Dict[str, FeedAdapter] = Depends(get_adapters),
    cache: ResponseCache = Depends(get_cache),
    client: httpx.AsyncClient = Depends(http_client),
):
    return await _serve("meme", ctx, adapters, cache, client, refresh)

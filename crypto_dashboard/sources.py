# crypto_dashboard/sources.py
"""
Market feeds for the dashboard.

Adapters:
  - PriceAdapter: CoinGecko /coins/markets for the user's assets
  - NewsAdapter: CryptoPanic (needs CRYPTOPANIC_API_KEY), then CryptoCompare (no key)
  - MemeAdapter: one random image post from r/cryptomemes

Each one normalizes its upstream into a small stable shape and has a static
fallback for when the upstream is down, slow, rate-limited or returns junk.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .config import (
    COINGECKO_API_KEY,
    CRYPTOPANIC_API_KEY,
    MEME_TTL,
    NEWS_TTL,
    PRICES_TTL,
)
from .errors import UpstreamError
from .feeds import FeedAdapter, FeedContext, get_json
from .logging_setup import get_logger

logger = get_logger("crypto_dashboard.sources")

# ---------- Utilities ----------

DEFAULT_ASSETS = ("bitcoin", "ethereum", "solana")
MAX_ASSETS = 10
NEWS_LIMIT = 5

# Onboarding offers friendly ids; CoinGecko knows a couple of them by another name
COINGECKO_IDS = {
    "avalanche": "avalanche-2",
    "polygon": "matic-network",
}

SYMBOLS = {
    "bitcoin": "BTC",
    "ethereum": "ETH",
    "cardano": "ADA",
    "solana": "SOL",
    "polkadot": "DOT",
    "chainlink": "LINK",
    "avalanche": "AVAX",
    "polygon": "MATIC",
    "litecoin": "LTC",
    "dogecoin": "DOGE",
}

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif", ".webp")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)

def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

def _coerce_published(value: Any) -> Optional[str]:
    """Accept unix seconds or ISO strings; always hand back ISO-8601 UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        try:
            return _iso(datetime.fromtimestamp(value, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            return None
    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return _iso(dt)

def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)

def selected_assets(ctx: FeedContext) -> List[str]:
    if not ctx.has_preferences:
        return list(DEFAULT_ASSETS)
    assets = [a.strip().lower() for a in ctx.assets if a and a.strip()]
    return assets[:MAX_ASSETS] or list(DEFAULT_ASSETS)

def asset_symbols(assets: Sequence[str]) -> List[str]:
    return [SYMBOLS[a] for a in assets if a in SYMBOLS]


# ---------- Prices ----------

FALLBACK_PRICES: List[Dict[str, Any]] = [
    {"id": "bitcoin", "name": "Bitcoin", "price": 65000, "change_24h": 1.8},
    {"id": "ethereum", "name": "Ethereum", "price": 3200, "change_24h": -0.6},
    {"id": "solana", "name": "Solana", "price": 145, "change_24h": 3.1},
]

class PriceAdapter(FeedAdapter):
    name = "prices"
    per_user = True
    fallback_note = "Live prices unavailable; showing illustrative values."

    base_url = "https://api.coingecko.com/api/v3"

    def __init__(self, api_key: str = COINGECKO_API_KEY, ttl: float = PRICES_TTL):
        self.api_key = api_key
        self.ttl = ttl

    async def fetch(self, ctx: FeedContext, client: httpx.AsyncClient) -> Dict[str, Any]:
        assets = selected_assets(ctx)
        upstream_ids = [COINGECKO_IDS.get(a, a) for a in assets]
        params = {
            "vs_currency": "usd",
            "ids": ",".join(upstream_ids),
            "price_change_percentage": "24h",
        }
        headers = {"x-cg-demo-api-key": self.api_key} if self.api_key else {}
        data = await get_json(client, self.name, f"{self.base_url}/coins/markets", params=params, headers=headers)
        if not isinstance(data, list):
            raise UpstreamError(self.name, "unexpected response shape")

        by_id = {row.get("id"): row for row in data if isinstance(row, dict)}
        prices: List[Dict[str, Any]] = []
        # Keep the order the user picked, and report their ids rather than CoinGecko's
        for asset, upstream_id in zip(assets, upstream_ids):
            row = by_id.get(upstream_id)
            if not row:
                continue
            price = _number(row.get("current_price"))
            if price is None:
                continue
            prices.append({
                "id": asset,
                "name": row.get("name") or asset.title(),
                "price": price,
                "change_24h": _number(row.get("price_change_percentage_24h")),
            })

        if not prices:
            raise UpstreamError(self.name, "no usable prices (rate-limit or unknown ids)")
        return {"prices": prices}

    def fallback(self, ctx: FeedContext) -> Dict[str, Any]:
        return {"prices": [dict(p) for p in FALLBACK_PRICES]}


# ---------- News ----------

class BaseNewsProvider:
    name = "base"

    async def fetch(self, client: httpx.AsyncClient, symbols: List[str], limit: int) -> List[Dict[str, Any]]:
        raise NotImplementedError

class CryptoPanicProvider(BaseNewsProvider):
    """https://cryptopanic.com/developers/api/ (posts endpoint, needs a token)."""

    name = "cryptopanic"
    url = "https://cryptopanic.com/api/v1/posts/"

    def __init__(self, api_key: str):
        self.api_key = api_key

    async def fetch(self, client: httpx.AsyncClient, symbols: List[str], limit: int) -> List[Dict[str, Any]]:
        params = {
            "auth_token": self.api_key,
            "public": "true",
            "filter": "hot",
            "currencies": ",".join(symbols or ["BTC", "ETH"]),
        }
        data = await get_json(client, "news", self.url, params=params)
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise UpstreamError("news", f"{self.name}: unexpected response shape")

        items: List[Dict[str, Any]] = []
        for a in results:
            if not isinstance(a, dict) or not a.get("title"):
                continue
            source = a.get("source") or {}
            items.append({
                "title": a["title"],
                "url": a.get("url") or "#",
                "published_at": _coerce_published(a.get("published_at")),
                "source": (source.get("title") if isinstance(source, dict) else None) or "CryptoPanic",
            })
        return items[:limit]

class CryptoCompareProvider(BaseNewsProvider):
    """https://min-api.cryptocompare.com/ news endpoint, works without a key."""

    name = "cryptocompare"
    url = "https://min-api.cryptocompare.com/data/v2/news/"

    async def fetch(self, client: httpx.AsyncClient, symbols: List[str], limit: int) -> List[Dict[str, Any]]:
        params = {"lang": "EN"}
        if symbols:
            params["categories"] = ",".join(symbols)
        data = await get_json(client, "news", self.url, params=params)
        results = data.get("Data") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise UpstreamError("news", f"{self.name}: unexpected response shape")

        items: List[Dict[str, Any]] = []
        for a in results:
            if not isinstance(a, dict) or not a.get("title"):
                continue
            info = a.get("source_info") or {}
            items.append({
                "title": a["title"],
                "url": a.get("url") or "#",
                "published_at": _coerce_published(a.get("published_on")),
                "source": (info.get("name") if isinstance(info, dict) else None) or a.get("source") or "CryptoCompare",
            })
        return items[:limit]

class NewsAdapter(FeedAdapter):
    name = "news"
    per_user = True
    fallback_note = "Live news unavailable; showing placeholder headlines."

    def __init__(self, providers: Optional[List[BaseNewsProvider]] = None, ttl: float = NEWS_TTL, limit: int = NEWS_LIMIT):
        if providers is None:
            providers = []
            if CRYPTOPANIC_API_KEY:
                providers.append(CryptoPanicProvider(CRYPTOPANIC_API_KEY))
            providers.append(CryptoCompareProvider())
        self.providers = providers
        self.ttl = ttl
        self.limit = limit

    async def fetch(self, ctx: FeedContext, client: httpx.AsyncClient) -> Dict[str, Any]:
        symbols = asset_symbols(selected_assets(ctx))
        errors: List[str] = []
        # First provider with articles wins; a failing one just hands over to the next
        for p in self.providers:
            try:
                items = await p.fetch(client, symbols, self.limit)
            except Exception as e:
                reason = e.reason if isinstance(e, UpstreamError) else f"{type(e).__name__}: {e}"
                logger.info("NEWS_PROVIDER_FAILED", extra={"provider": p.name, "error": reason})
                errors.append(f"{p.name}: {reason}")
                continue
            if items:
                return {"news": items[: self.limit]}
            errors.append(f"{p.name}: no articles")
        raise UpstreamError(self.name, "; ".join(errors) or "no providers configured")

    def fallback(self, ctx: FeedContext) -> Dict[str, Any]:
        now = _iso(_utc_now())
        return {
            "news": [
                {"title": "Bitcoin reaches new highs", "url": "#", "published_at": now, "source": "Crypto News"},
                {"title": "Ethereum upgrade successful", "url": "#", "published_at": now, "source": "Crypto News"},
            ]
        }


# ---------- Meme ----------

FALLBACK_MEMES: List[Dict[str, str]] = [
    {"url": "https://i.imgflip.com/1bij.jpg", "title": "HODL Strong!", "source": "Static"},
    {"url": "https://i.imgflip.com/30b1gx.jpg", "title": "To the Moon!", "source": "Static"},
]

def is_image_post(post: Dict[str, Any]) -> bool:
    url = str(post.get("url") or "")
    if not url or post.get("over_18"):
        return False
    if post.get("post_hint") == "image":
        return True
    return url.lower().split("?", 1)[0].endswith(IMAGE_SUFFIXES)

class MemeAdapter(FeedAdapter):
    name = "meme"
    fallback_note = "Reddit unavailable; showing a classic."

    url = "https://www.reddit.com/r/cryptomemes/hot.json"

    def __init__(self, rng: Optional[random.Random] = None, ttl: float = MEME_TTL, listing_size: int = 25):
        self.rng = rng or random.Random()
        self.ttl = ttl
        self.listing_size = listing_size

    async def fetch(self, ctx: FeedContext, client: httpx.AsyncClient) -> Dict[str, Any]:
        data = await get_json(client, self.name, self.url, params={"limit": self.listing_size})
        try:
            children = data["data"]["children"]
        except (KeyError, TypeError):
            raise UpstreamError(self.name, "unexpected response shape")

        posts = [c.get("data") or {} for c in children if isinstance(c, dict)]
        images = [p for p in posts if is_image_post(p)]
        if not images:
            raise UpstreamError(self.name, "no image posts in listing")

        pick = self.rng.choice(images)
        return {"url": pick["url"], "title": pick.get("title") or "", "source": "Reddit"}

    def fallback(self, ctx: FeedContext) -> Dict[str, Any]:
        return dict(self.rng.choice(FALLBACK_MEMES))

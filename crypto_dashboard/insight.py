# crypto_dashboard/insight.py
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from openai import AsyncOpenAI

from .config import INSIGHT_TTL, OPENAI_API_KEY, OPENAI_MODEL, UPSTREAM_TIMEOUT
from .errors import UpstreamError
from .feeds import FeedAdapter, FeedContext
from .logging_setup import get_logger
from .schema import Archetype

logger = get_logger("crypto_dashboard.insight")

STATIC_INSIGHTS: Dict[str, str] = {
    Archetype.HODLER.value:
        "For HODLers: Long-term fundamentals remain strong. Consider DCA and ignore short-term volatility.",
    Archetype.DAY_TRADER.value:
        "For Day Traders: Increased volatility detected. Watch support and resistance levels closely.",
    Archetype.NFT_COLLECTOR.value:
        "NFT markets are stabilizing. Blue-chip collections show resilience.",
    Archetype.DEFI_ENTHUSIAST.value:
        "For DeFi Enthusiasts: Track protocol TVL and audit history. Yields that look too good usually are.",
    Archetype.GENERAL_INVESTOR.value:
        "Diversification remains key. Stay updated on macro trends and regulatory news.",
}
DEFAULT_ARCHETYPE = Archetype.GENERAL_INVESTOR.value

MAX_WORDS = 60
MAX_TOKENS = 120

SYS_PROMPT = (
    "You are a concise crypto market assistant. Give one short, practical insight. "
    "No financial advice disclaimers, no hype, no price predictions."
)

_client: Optional[AsyncOpenAI] = None


def _get_client() -> Optional[AsyncOpenAI]:
    global _client
    if _client is not None:
        return _client
    if OPENAI_API_KEY:
        # No retries: a failed call goes straight to the static table
        _client = AsyncOpenAI(api_key=OPENAI_API_KEY, timeout=UPSTREAM_TIMEOUT, max_retries=0)
        return _client
    return None


def static_insight(archetype: Optional[str]) -> str:
    return STATIC_INSIGHTS.get(archetype or "", STATIC_INSIGHTS[DEFAULT_ARCHETYPE])


def build_prompt(ctx: FeedContext) -> str:
    if not ctx.has_preferences:
        return (
            f"Investor type: {DEFAULT_ARCHETYPE}\n"
            "The investor has not completed onboarding yet.\n\n"
            f"Write today's general market insight in at most {MAX_WORDS} words."
        )
    archetype = ctx.archetype or DEFAULT_ARCHETYPE
    assets = ", ".join(ctx.assets) or "bitcoin, ethereum"
    content = ", ".join(ctx.content_types) or "Market News"
    return (
        f"Investor type: {archetype}\n"
        f"Assets of interest: {assets}\n"
        f"Preferred content: {content}\n\n"
        f"Write today's insight for this investor in at most {MAX_WORDS} words."
    )


def _clip_words(text: str, limit: int = MAX_WORDS) -> str:
    words = text.split()
    if len(words) <= limit:
        return text
    return " ".join(words[:limit]).rstrip(",;:") + "…"


class InsightAdapter(FeedAdapter):
    name = "insight"
    per_user = True
    fallback_note = "AI insight unavailable; showing a standard insight for your investor type."

    def __init__(self, llm: Optional[AsyncOpenAI] = None, model: str = OPENAI_MODEL, ttl: float = INSIGHT_TTL):
        self._llm = llm
        self.model = model
        self.ttl = ttl

    @property
    def llm(self) -> Optional[AsyncOpenAI]:
        return self._llm or _get_client()

    async def fetch(self, ctx: FeedContext, client: httpx.AsyncClient) -> Dict[str, Any]:
        llm = self.llm
        if llm is None:
            raise UpstreamError(self.name, "no OpenAI credentials configured")

        resp = await llm.chat.completions.create(
            model=self.model,
            temperature=0.7,
            max_tokens=MAX_TOKENS,
            messages=[
                {"role": "system", "content": SYS_PROMPT},
                {"role": "user", "content": build_prompt(ctx)},
            ],
        )
        text = ""
        if resp.choices:
            text = (resp.choices[0].message.content or "").strip()
        if not text:
            raise UpstreamError(self.name, "empty completion")
        return {"insight": _clip_words(text)}

    def fallback(self, ctx: FeedContext) -> Dict[str, Any]:
        return {"insight": static_insight(ctx.archetype)}

# crypto_dashboard/dependencies.py
"""
Request-scoped collaborators for the routes. Tests swap any of them through
`app.dependency_overrides`.
"""

from typing import AsyncIterator, Dict

import httpx
from fastapi import Depends, Request
from sqlmodel import Session

from .cache import ResponseCache
from .config import UPSTREAM_TIMEOUT
from .feeds import USER_AGENT, FeedAdapter, FeedContext
from .preference_store import get_current
from .schema import UserView
from .security import current_user
from .store import session_dependency


def get_cache(request: Request) -> ResponseCache:
    return request.app.state.cache


def get_adapters(request: Request) -> Dict[str, FeedAdapter]:
    return request.app.state.adapters


async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    # One client per request, shared by every feed that request touches
    async with httpx.AsyncClient(
        timeout=UPSTREAM_TIMEOUT,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    ) as client:
        yield client


def feed_context(
    user: UserView = Depends(current_user),
    session: Session = Depends(session_dependency),
) -> FeedContext:
    return FeedContext.from_preferences(user.id, get_current(session, user.id))

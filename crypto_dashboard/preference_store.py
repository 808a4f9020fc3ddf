# crypto_dashboard/preference_store.py
"""
Onboarding answers. Every save inserts a new row; the newest row for a user is
their current preferences and older rows are kept but never read.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlmodel import Session, col, select

from .cache import ResponseCache, user_prefix
from .errors import ValidationError
from .logging_setup import get_logger
from .models import UserPreferences
from .schema import Archetype
from .store import store_errors

logger = get_logger("crypto_dashboard.preferences")

ARCHETYPES = [a.value for a in Archetype]


def get_current(session: Session, user_id: int) -> Optional[UserPreferences]:
    """Newest record for the user, or None when onboarding was never completed."""
    stmt = (
        select(UserPreferences)
        .where(UserPreferences.user_id == user_id)
        .order_by(col(UserPreferences.created_at).desc(), col(UserPreferences.id).desc())
        .limit(1)
    )
    with store_errors("load preferences"):
        return session.exec(stmt).first()


def _clean_list(field: str, values: Optional[Iterable[str]]) -> List[str]:
    if values is None:
        raise ValidationError("All preference fields are required")
    if isinstance(values, str):
        raise ValidationError(f"{field} must be a list")
    cleaned = [str(v).strip() for v in values if v is not None and str(v).strip()]
    if not cleaned:
        raise ValidationError(f"{field} must contain at least one entry")
    return cleaned


def _dedupe(values: List[str]) -> List[str]:
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


def save(
    session: Session,
    user_id: int,
    assets: Optional[List[str]],
    archetype: Optional[str],
    content_types: Optional[List[str]],
    cache: Optional[ResponseCache] = None,
) -> int:
    """
    Validate and insert a new preferences record, returning its id.

    Empty asset or content lists are rejected. When a cache is given, the
    user's personalised feed entries are dropped so the next read reflects
    the new answers.
    """
    if assets is None or archetype is None or content_types is None:
        raise ValidationError("All preference fields are required")

    assets = _clean_list("interested_assets", assets)
    content_types = _dedupe(_clean_list("content_types", content_types))
    archetype = archetype.strip()
    if archetype not in ARCHETYPES:
        raise ValidationError(f"investor_type must be one of: {', '.join(ARCHETYPES)}")

    record = UserPreferences(
        user_id=user_id,
        interested_assets=assets,
        investor_type=archetype,
        content_types=content_types,
    )
    with store_errors("save preferences"):
        session.add(record)
        session.commit()
        session.refresh(record)

    if cache is not None:
        cache.invalidate(user_prefix(user_id))

    logger.info(
        "PREFERENCES_SAVED",
        extra={"user_id": user_id, "pref_id": record.id, "assets": len(assets), "archetype": archetype},
    )
    return record.id

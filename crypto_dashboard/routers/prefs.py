from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from .. import preference_store
from ..cache import ResponseCache
from ..dependencies import get_cache
from ..logging_setup import get_logger
from ..schema import PreferencesIn, PreferencesOut, SavedOut, UserView
from ..security import current_user
from ..store import session_dependency

logger = get_logger("crypto_dashboard.routes.prefs")

router = APIRouter(prefix="/dashboard/preferences", tags=["preferences"])

@router.get("", response_model=Optional[PreferencesOut])
def get_preferences(user: UserView = Depends(current_user), session: Session = Depends(session_dependency)):
    """Current onboarding answers, or null if the user never completed onboarding."""
    prefs = preference_store.get_current(session, user.id)
    return PreferencesOut.model_validate(prefs) if prefs else None

@router.post("", response_model=SavedOut)
def save_preferences(
    body: PreferencesIn,
    user: UserView = Depends(current_user),
    session: Session = Depends(session_dependency),
    cache: ResponseCache = Depends(get_cache),
):
    logger.info(f"Saving preferences for user={user.id}")
    pref_id = preference_store.save(
        session,
        user.id,
        body.interested_assets,
        body.investor_type,
        body.content_types,
        cache=cache,
    )
    return SavedOut(message="Preferences saved successfully", id=pref_id)

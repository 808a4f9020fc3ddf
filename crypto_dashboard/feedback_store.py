# crypto_dashboard/feedback_store.py
"""
Thumbs up/down votes. Append-only: repeated votes on the same item are all kept.
"""

from __future__ import annotations

from typing import Any, List, Optional

from sqlmodel import Session, col, select

from .errors import ValidationError
from .logging_setup import get_logger
from .models import Feedback
from .store import store_errors

logger = get_logger("crypto_dashboard.feedback")

VALID_VOTES = (1, -1)


def _valid_vote(vote: Any) -> bool:
    # bool is an int subclass; True must not count as an upvote. JSON 1.0 is the number one
    if isinstance(vote, bool) or not isinstance(vote, (int, float)):
        return False
    return vote in VALID_VOTES


def record(session: Session, user_id: int, content_type: Optional[str], content_id: Any, vote: Any) -> int:
    content_type = (content_type or "").strip()
    content_id = "" if content_id is None else str(content_id).strip()
    if not content_type or not content_id or vote is None:
        raise ValidationError("content_type, content_id, and vote are required")
    if not _valid_vote(vote):
        raise ValidationError("Vote must be 1 or -1")
    vote = int(vote)

    fb = Feedback(user_id=user_id, content_type=content_type, content_id=content_id, vote=vote)
    with store_errors("save feedback"):
        session.add(fb)
        session.commit()
        session.refresh(fb)

    logger.info(
        "FEEDBACK_SAVED",
        extra={"user_id": user_id, "content_type": content_type, "content_id": content_id, "vote": vote},
    )
    return fb.id


def list_for_user(session: Session, user_id: int) -> List[Feedback]:
    """Direct query for admin tooling and tests; there is no read route."""
    stmt = select(Feedback).where(Feedback.user_id == user_id).order_by(col(Feedback.id))
    with store_errors("load feedback"):
        return list(session.exec(stmt).all())

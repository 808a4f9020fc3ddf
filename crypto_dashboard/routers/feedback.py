from fastapi import APIRouter, Depends
from sqlmodel import Session

from .. import feedback_store
from ..logging_setup import get_logger
from ..schema import FeedbackIn, SavedOut, UserView
from ..security import current_user
from ..store import session_dependency

logger = get_logger("crypto_dashboard.routes.feedback")

router = APIRouter(prefix="/dashboard/feedback", tags=["feedback"])

@router.post("", response_model=SavedOut)
def post_feedback(
    body: FeedbackIn,
    user: UserView = Depends(current_user),
    session: Session = Depends(session_dependency),
):
    logger.info(f"Feedback received: user={user.id} type={body.content_type} id={body.content_id} vote={body.vote}")
    fb_id = feedback_store.record(session, user.id, body.content_type, body.content_id, body.vote)
    return SavedOut(message="Feedback saved successfully", id=fb_id)

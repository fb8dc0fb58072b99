"""
Quiz submission endpoint
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quizhub.core.config import settings
from quizhub.core.database import get_db
from quizhub.core.exceptions import AuthenticationException
from quizhub.core.security import get_optional_user
from quizhub.models import User
from quizhub.realtime.manager import ConnectionManager, get_notifier
from quizhub.schemas.common import ok
from quizhub.schemas.progress import QuizSubmission
from quizhub.services.progress import ProgressService

router = APIRouter()


@router.post("/submit")
async def submit_quiz(
    data: QuizSubmission,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """
    Score a set of answers on the server.

    Signed-in users have their progress stored; anonymous submissions are
    only scored, and only when ALLOW_ANONYMOUS_PROGRESS is enabled.
    """
    if current_user is None and not settings.ALLOW_ANONYMOUS_PROGRESS:
        raise AuthenticationException()

    result = ProgressService.submit(db, current_user, data)
    if result.stats is not None:
        await notifier.progress_updated(current_user.id, result.question_set_id, result.stats)
    return ok(result)

"""
User progress endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quizhub.core.database import get_db
from quizhub.core.security import get_current_user
from quizhub.models import User
from quizhub.realtime.manager import ConnectionManager, get_notifier
from quizhub.schemas.common import ok
from quizhub.schemas.progress import ProgressRecord
from quizhub.services.progress import ProgressService

router = APIRouter()


@router.post("")
async def record_progress(
    data: ProgressRecord,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Store the latest answer to one question"""
    stats = ProgressService.record(db, current_user, data)
    await notifier.progress_updated(current_user.id, data.question_set_id, stats)
    return ok(stats, "Progress saved")


@router.get("")
async def my_progress(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Stats for every question set the user has answered in"""
    return ok(ProgressService.all_stats(db, current_user.id))


@router.get("/users/{user_id}")
async def user_progress(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(ProgressService.stats_for_user(db, current_user, user_id))


@router.get("/{question_set_id}")
async def question_set_progress(
    question_set_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(ProgressService.detail(db, current_user, question_set_id))


@router.delete("/{question_set_id}")
async def reset_progress(
    question_set_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: ConnectionManager = Depends(get_notifier),
):
    stats = ProgressService.reset(db, current_user, question_set_id)
    await notifier.progress_updated(current_user.id, question_set_id, stats)
    return ok(stats, "Progress reset")

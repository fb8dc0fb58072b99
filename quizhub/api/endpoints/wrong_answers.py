"""
Wrong-answer notebook endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from quizhub.core.database import get_db
from quizhub.core.security import get_current_user
from quizhub.models import User
from quizhub.schemas.common import ok
from quizhub.schemas.progress import BatchDelete, WrongAnswerCreate, WrongAnswerMemo, WrongAnswerResponse
from quizhub.services.wrong_answers import WrongAnswerService

router = APIRouter()


@router.get("")
async def list_wrong_answers(
    question_set_id: Optional[str] = Query(None, alias="questionSetId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    records = WrongAnswerService.list_for_user(db, current_user, question_set_id)
    return ok([WrongAnswerResponse.model_validate(r) for r in records])


@router.post("")
async def save_wrong_answer(
    data: WrongAnswerCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Save or refresh the snapshot of a missed question"""
    record = WrongAnswerService.save(db, current_user, data)
    return ok(WrongAnswerResponse.model_validate(record), "Wrong answer saved")


@router.post("/batch-delete")
async def batch_delete(
    data: BatchDelete,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deleted = WrongAnswerService.batch_delete(db, current_user, data.ids)
    return ok({"deleted": deleted}, f"Deleted {deleted} records")


@router.get("/{wrong_answer_id}")
async def get_wrong_answer(
    wrong_answer_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(WrongAnswerResponse.model_validate(WrongAnswerService.get(db, current_user, wrong_answer_id)))


@router.patch("/{wrong_answer_id}")
async def update_memo(
    wrong_answer_id: str,
    data: WrongAnswerMemo,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = WrongAnswerService.update_memo(db, current_user, wrong_answer_id, data.memo)
    return ok(WrongAnswerResponse.model_validate(record), "Memo updated")


@router.delete("/{wrong_answer_id}")
async def delete_wrong_answer(
    wrong_answer_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    WrongAnswerService.delete(db, current_user, wrong_answer_id)
    return ok(message="Wrong answer deleted")


@router.post("/{wrong_answer_id}/mastered")
async def mark_mastered(
    wrong_answer_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """A mastered question leaves the notebook"""
    WrongAnswerService.delete(db, current_user, wrong_answer_id)
    return ok(message="Marked as mastered")

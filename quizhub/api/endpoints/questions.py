"""
Question endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from quizhub.core.database import get_db
from quizhub.core.logging import audit
from quizhub.core.security import require_admin
from quizhub.models import User
from quizhub.realtime.manager import ConnectionManager, get_notifier
from quizhub.schemas.common import PageParams, ok
from quizhub.schemas.question import QuestionCreate, QuestionResponse, QuestionUpdate
from quizhub.services.question_sets import QuestionSetService
from quizhub.services.questions import QuestionService

router = APIRouter()


@router.get("")
async def list_questions(
    params: PageParams = Depends(),
    question_set_id: Optional[str] = Query(None, alias="questionSetId"),
    db: Session = Depends(get_db),
):
    return ok(QuestionService.list_questions(db, params, question_set_id))


@router.get("/{question_id}")
async def get_question(question_id: str, db: Session = Depends(get_db)):
    """Question with its options in display order"""
    return ok(QuestionResponse.model_validate(QuestionService.get(db, question_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_question(
    data: QuestionCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Create a question in ``questionSetId`` (admin)"""
    question = QuestionService.create(db, data)
    question_set = QuestionSetService.get(db, question.question_set_id)
    await notifier.question_count_updated(question_set.id, question_set.question_count)
    return ok(QuestionResponse.model_validate(question), "Question created")


@router.put("/{question_id}")
async def update_question(
    question_id: str,
    data: QuestionUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    question = QuestionService.update(db, question_id, data)
    return ok(QuestionResponse.model_validate(question), "Question updated")


@router.delete("/{question_id}")
async def delete_question(
    question_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    notifier: ConnectionManager = Depends(get_notifier),
):
    question_set_id, count = QuestionService.delete(db, question_id)
    await notifier.question_count_updated(question_set_id, count)
    audit("question.delete", current_user, target_id=question_id, question_set_id=question_set_id)
    return ok({"questionSetId": question_set_id, "questionCount": count}, "Question deleted")

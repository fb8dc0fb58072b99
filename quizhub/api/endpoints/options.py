"""
Option endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from quizhub.core.database import get_db
from quizhub.core.security import require_admin
from quizhub.models import User
from quizhub.schemas.common import ok
from quizhub.schemas.question import OptionResponse, OptionStandaloneCreate, OptionUpdate
from quizhub.services.questions import OptionService

router = APIRouter()


@router.get("")
async def list_options(
    question_id: str = Query(..., alias="questionId"),
    db: Session = Depends(get_db),
):
    options = OptionService.list_for_question(db, question_id)
    return ok([OptionResponse.model_validate(o) for o in options])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_option(
    data: OptionStandaloneCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Append an option to a question (admin)"""
    option = OptionService.create(db, data)
    return ok(OptionResponse.model_validate(option), "Option created")


@router.put("/{option_id}")
async def update_option(
    option_id: str,
    data: OptionUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    option = OptionService.update(db, option_id, data)
    return ok(OptionResponse.model_validate(option), "Option updated")


@router.delete("/{option_id}")
async def delete_option(
    option_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    OptionService.delete(db, option_id)
    return ok(message="Option deleted")

"""Wrong-answer notebook service"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from quizhub.core.exceptions import NotFoundException
from quizhub.models import User, WrongAnswer
from quizhub.schemas.progress import WrongAnswerCreate

logger = logging.getLogger(__name__)


class WrongAnswerService:
    """Wrong answer service"""

    @staticmethod
    def list_for_user(db: Session, user: User, question_set_id: Optional[str] = None) -> List[WrongAnswer]:
        query = db.query(WrongAnswer).filter(WrongAnswer.user_id == user.id)
        if question_set_id:
            query = query.filter(WrongAnswer.question_set_id == question_set_id)
        return query.order_by(WrongAnswer.updated_at.desc()).all()

    @staticmethod
    def get(db: Session, user: User, wrong_answer_id: str) -> WrongAnswer:
        record = (
            db.query(WrongAnswer)
            .filter(WrongAnswer.id == wrong_answer_id, WrongAnswer.user_id == user.id)
            .first()
        )
        if not record:
            raise NotFoundException("Wrong answer record")
        return record

    @staticmethod
    def save(db: Session, user: User, data: WrongAnswerCreate) -> WrongAnswer:
        """Insert or refresh the snapshot for (user, question); an existing memo survives"""
        record = (
            db.query(WrongAnswer)
            .filter(WrongAnswer.user_id == user.id, WrongAnswer.question_id == data.question_id)
            .first()
        )
        fields = data.model_dump()
        if record is None:
            record = WrongAnswer(user_id=user.id, **fields)
            db.add(record)
        else:
            if fields.get("memo") is None:
                fields.pop("memo")
            for name, value in fields.items():
                setattr(record, name, value)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def update_memo(db: Session, user: User, wrong_answer_id: str, memo: Optional[str]) -> WrongAnswer:
        record = WrongAnswerService.get(db, user, wrong_answer_id)
        record.memo = memo
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def delete(db: Session, user: User, wrong_answer_id: str) -> None:
        record = WrongAnswerService.get(db, user, wrong_answer_id)
        db.delete(record)
        db.commit()

    @staticmethod
    def batch_delete(db: Session, user: User, ids: List[str]) -> int:
        deleted = (
            db.query(WrongAnswer)
            .filter(WrongAnswer.user_id == user.id, WrongAnswer.id.in_(ids))
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

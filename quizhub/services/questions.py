"""
Question and option service
Every add/remove of a question recounts its set in the same transaction
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from quizhub.core.exceptions import NotFoundException, ValidationException
from quizhub.models import Option, Question, QuestionType
from quizhub.schemas.common import Page, PageParams, paginate
from quizhub.schemas.question import (
    OptionCreate,
    OptionStandaloneCreate,
    OptionUpdate,
    QuestionCreate,
    QuestionResponse,
    QuestionUpdate,
    check_option_set,
)
from quizhub.services.question_sets import QuestionSetService
from quizhub.utils.validators import option_label

logger = logging.getLogger(__name__)


def build_options(options: List[OptionCreate]) -> List[Option]:
    """Option rows in submitted order; labels default to A, B, C..."""
    return [
        Option(
            text=option.text.strip(),
            is_correct=option.is_correct,
            option_index=(option.option_index or option_label(position)).upper(),
            order_index=position,
        )
        for position, option in enumerate(options)
    ]


def ensure_valid_options(question_type: QuestionType, options) -> None:
    """check_option_set for stored or submitted options, as a 400"""
    try:
        check_option_set(question_type, options)
    except ValueError as e:
        raise ValidationException(str(e))


class QuestionService:
    """Question service"""

    @staticmethod
    def get(db: Session, question_id: str) -> Question:
        question = (
            db.query(Question)
            .options(selectinload(Question.options))
            .filter(Question.id == question_id)
            .first()
        )
        if not question:
            raise NotFoundException("Question")
        return question

    @staticmethod
    def list_questions(db: Session, params: PageParams, question_set_id: Optional[str] = None) -> Page:
        query = db.query(Question).options(selectinload(Question.options))
        if question_set_id:
            query = query.filter(Question.question_set_id == question_set_id)
        query = query.order_by(Question.question_set_id, Question.order_index, Question.created_at)
        return paginate(query, params, QuestionResponse)

    @staticmethod
    def _next_order_index(db: Session, question_set_id: str) -> int:
        current = (
            db.query(func.max(Question.order_index))
            .filter(Question.question_set_id == question_set_id)
            .scalar()
        )
        return 0 if current is None else current + 1

    @staticmethod
    def add_question(db: Session, question_set_id: str, data: QuestionCreate, commit: bool = True) -> Question:
        """Create a question with its options and refresh the set's count"""
        QuestionSetService.get(db, question_set_id)

        order_index = data.order_index
        if order_index is None:
            order_index = QuestionService._next_order_index(db, question_set_id)

        question = Question(
            question_set_id=question_set_id,
            text=data.text.strip(),
            question_type=data.question_type,
            explanation=data.explanation or "",
            points=data.points,
            difficulty=data.difficulty,
            time_limit=data.time_limit,
            order_index=order_index,
            meta=data.meta,
            options=build_options(data.options),
        )
        db.add(question)
        QuestionSetService.refresh_question_count(db, question_set_id)
        if commit:
            db.commit()
            db.refresh(question)
        return question

    @staticmethod
    def create(db: Session, data: QuestionCreate) -> Question:
        if not data.question_set_id:
            raise ValidationException("questionSetId is required")
        return QuestionService.add_question(db, data.question_set_id, data)

    @staticmethod
    def update(db: Session, question_id: str, data: QuestionUpdate) -> Question:
        question = QuestionService.get(db, question_id)
        changes = data.model_dump(exclude_unset=True, exclude={"options"})
        for field, value in changes.items():
            if value is None and field in ("text", "question_type", "explanation", "points", "order_index"):
                continue
            setattr(question, field, value)

        if data.options is not None:
            ensure_valid_options(question.question_type, data.options)
            question.options = build_options(data.options)
        else:
            ensure_valid_options(question.question_type, question.options)

        db.commit()
        db.refresh(question)
        return question

    @staticmethod
    def delete(db: Session, question_id: str) -> Tuple[str, int]:
        """Delete a question; returns (question_set_id, new count)"""
        question = QuestionService.get(db, question_id)
        question_set_id = question.question_set_id
        db.delete(question)
        count = QuestionSetService.refresh_question_count(db, question_set_id)
        db.commit()
        logger.info(f"Question {question_id} deleted from set {question_set_id}")
        return question_set_id, count


class OptionService:
    """Option service"""

    @staticmethod
    def get(db: Session, option_id: str) -> Option:
        option = db.query(Option).filter(Option.id == option_id).first()
        if not option:
            raise NotFoundException("Option")
        return option

    @staticmethod
    def list_for_question(db: Session, question_id: str) -> List[Option]:
        QuestionService.get(db, question_id)
        return (
            db.query(Option)
            .filter(Option.question_id == question_id)
            .order_by(Option.order_index)
            .all()
        )

    @staticmethod
    def create(db: Session, data: OptionStandaloneCreate) -> Option:
        question = QuestionService.get(db, data.question_id)
        if data.is_correct and question.question_type == QuestionType.SINGLE:
            if any(option.is_correct for option in question.options):
                raise ValidationException("A single-choice question already has a correct option")

        position = len(question.options)
        option = Option(
            question_id=question.id,
            text=data.text.strip(),
            is_correct=data.is_correct,
            option_index=(data.option_index or option_label(position)).upper(),
            order_index=position,
        )
        db.add(option)
        db.commit()
        db.refresh(option)
        return option

    @staticmethod
    def update(db: Session, option_id: str, data: OptionUpdate) -> Option:
        option = OptionService.get(db, option_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("is_correct") and option.question.question_type == QuestionType.SINGLE:
            others = [o for o in option.question.options if o.id != option.id and o.is_correct]
            if others:
                raise ValidationException("A single-choice question already has a correct option")
        for field, value in changes.items():
            if value is not None:
                setattr(option, field, value.upper() if field == "option_index" else value)
        if changes.get("is_correct") is not None:
            ensure_valid_options(option.question.question_type, option.question.options)
        db.commit()
        db.refresh(option)
        return option

    @staticmethod
    def delete(db: Session, option_id: str) -> None:
        option = OptionService.get(db, option_id)
        remaining = [o for o in option.question.options if o.id != option.id]
        ensure_valid_options(option.question.question_type, remaining)
        db.delete(option)
        db.commit()

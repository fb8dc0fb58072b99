"""
Question set service
Catalog queries, admin maintenance and the denormalized question count
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from quizhub.core.exceptions import NotFoundException, ValidationException
from quizhub.db.fields import resolve_sort_column
from quizhub.models import Question, QuestionSet
from quizhub.schemas.common import Page, PageParams, paginate
from quizhub.schemas.question_set import (
    FeaturedUpdate,
    QuestionSetCreate,
    QuestionSetResponse,
    QuestionSetUpdate,
)

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = ("created_at", "updated_at", "title", "category", "price", "question_count")
REQUIRED_FIELDS = ("title", "description", "category", "icon", "is_paid", "is_featured")


class QuestionSetService:
    """Question set service"""

    @staticmethod
    def get(db: Session, question_set_id: str) -> QuestionSet:
        question_set = db.query(QuestionSet).filter(QuestionSet.id == question_set_id).first()
        if not question_set:
            raise NotFoundException("Question set")
        return question_set

    @staticmethod
    def list_sets(
        db: Session,
        params: PageParams,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "createdAt",
        order: str = "desc",
    ) -> Page:
        """Paginated catalog, newest first unless a sort field is given"""
        query = db.query(QuestionSet)
        if category:
            query = query.filter(QuestionSet.category == category)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(QuestionSet.title.ilike(pattern), QuestionSet.description.ilike(pattern))
            )

        column = resolve_sort_column(QuestionSet, sort_by, SORTABLE_COLUMNS)
        if column is None:
            raise ValidationException(f"Cannot sort by '{sort_by}'")
        query = query.order_by(column.asc() if order.lower() == "asc" else column.desc(), QuestionSet.id)

        return paginate(query, params, QuestionSetResponse)

    @staticmethod
    def categories(db: Session) -> List[str]:
        rows = db.query(QuestionSet.category).distinct().order_by(QuestionSet.category).all()
        return [row[0] for row in rows if row[0]]

    @staticmethod
    def featured(db: Session, category: Optional[str] = None) -> List[QuestionSet]:
        query = db.query(QuestionSet).filter(QuestionSet.is_featured.is_(True))
        if category:
            query = query.filter(
                or_(QuestionSet.featured_category == category, QuestionSet.category == category)
            )
        return query.order_by(QuestionSet.created_at.desc()).all()

    @staticmethod
    def create(db: Session, data: QuestionSetCreate) -> QuestionSet:
        question_set = QuestionSet(**data.model_dump())
        question_set.question_count = 0
        db.add(question_set)
        db.commit()
        db.refresh(question_set)
        logger.info(f"Question set created: {question_set.id} ({question_set.title})")
        return question_set

    @staticmethod
    def update(db: Session, question_set_id: str, data: QuestionSetUpdate) -> QuestionSet:
        question_set = QuestionSetService.get(db, question_set_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            # An explicit null leaves a required column unchanged
            if value is None and field in REQUIRED_FIELDS:
                continue
            setattr(question_set, field, value)

        if question_set.is_paid and not question_set.price:
            raise ValidationException("A paid question set needs a price greater than 0")
        if not question_set.is_paid:
            question_set.trial_questions = None

        db.commit()
        db.refresh(question_set)
        return question_set

    @staticmethod
    def set_featured(db: Session, question_set_id: str, data: FeaturedUpdate) -> QuestionSet:
        question_set = QuestionSetService.get(db, question_set_id)
        question_set.is_featured = data.is_featured
        question_set.featured_category = data.featured_category if data.is_featured else None
        db.commit()
        db.refresh(question_set)
        return question_set

    @staticmethod
    def delete(db: Session, question_set_id: str) -> None:
        question_set = QuestionSetService.get(db, question_set_id)
        db.delete(question_set)
        db.commit()
        logger.info(f"Question set deleted: {question_set_id}")

    @staticmethod
    def refresh_question_count(db: Session, question_set_id: str) -> int:
        """
        Recompute question_count from the live rows. Call inside the
        transaction that added or removed questions, before committing.
        """
        db.flush()
        count = (
            db.query(func.count(Question.id))
            .filter(Question.question_set_id == question_set_id)
            .scalar()
        )
        db.query(QuestionSet).filter(QuestionSet.id == question_set_id).update(
            {QuestionSet.question_count: count}, synchronize_session="fetch"
        )
        return count

    @staticmethod
    def questions(
        db: Session, question_set: QuestionSet, full_access: bool
    ) -> Tuple[List[Question], bool]:
        """
        Ordered questions with options. Without full access to a paid set
        only the first ``trial_questions`` questions are returned.

        Returns (questions, truncated).
        """
        query = (
            db.query(Question)
            .options(selectinload(Question.options))
            .filter(Question.question_set_id == question_set.id)
            .order_by(Question.order_index, Question.created_at)
        )
        if full_access or not question_set.is_paid:
            return query.all(), False

        trial = question_set.trial_questions or 0
        return query.limit(trial).all() if trial else [], True

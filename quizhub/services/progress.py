"""
Progress service
Per-question answer records, per-set statistics and server-side quiz scoring
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from quizhub.core.exceptions import AuthorizationException, NotFoundException, ValidationException
from quizhub.models import Question, QuestionSet, User, UserProgress
from quizhub.models.base import utcnow
from quizhub.schemas.progress import (
    ProgressDetail,
    ProgressEntry,
    ProgressRecord,
    ProgressStats,
    QuestionResult,
    QuizResult,
    QuizSubmission,
)
from quizhub.services.purchases import PurchaseService
from quizhub.services.question_sets import QuestionSetService

logger = logging.getLogger(__name__)


class ProgressService:
    """Progress service"""

    @staticmethod
    def stats(db: Session, user_id: str, question_set_id: str) -> ProgressStats:
        """Aggregate a user's answers within one question set"""
        total_questions = (
            db.query(func.count(Question.id))
            .filter(Question.question_set_id == question_set_id)
            .scalar()
        )
        records = (
            db.query(UserProgress)
            .filter(UserProgress.user_id == user_id, UserProgress.question_set_id == question_set_id)
            .all()
        )
        completed = len(records)
        correct = sum(1 for record in records if record.is_correct)
        total_time = sum(record.time_spent or 0 for record in records)
        positioned = [record for record in records if record.last_question_index is not None]
        resume_at = max(positioned, key=lambda record: record.last_accessed, default=None)

        return ProgressStats(
            question_set_id=question_set_id,
            total_questions=total_questions,
            completed_questions=completed,
            correct_answers=correct,
            total_time_spent=total_time,
            average_time_spent=round(total_time / completed, 2) if completed else 0.0,
            accuracy=round(correct / completed * 100, 2) if completed else 0.0,
            last_accessed=max((record.last_accessed for record in records), default=None),
            last_question_index=resume_at.last_question_index if resume_at else None,
        )

    @staticmethod
    def _upsert(db: Session, user_id: str, question_set_id: str, question_id: str,
                is_correct: bool, time_spent: int,
                last_question_index: Optional[int] = None) -> UserProgress:
        record = (
            db.query(UserProgress)
            .filter(UserProgress.user_id == user_id, UserProgress.question_id == question_id)
            .first()
        )
        if record is None:
            record = UserProgress(user_id=user_id, question_set_id=question_set_id, question_id=question_id)
            db.add(record)
        record.is_correct = is_correct
        record.time_spent = time_spent
        record.last_accessed = utcnow()
        if last_question_index is not None:
            record.last_question_index = last_question_index
        return record

    @staticmethod
    def record(db: Session, user: User, data: ProgressRecord) -> ProgressStats:
        """Store the latest answer to a question and return the refreshed stats"""
        question = db.query(Question).filter(Question.id == data.question_id).first()
        if not question:
            raise NotFoundException("Question")
        if question.question_set_id != data.question_set_id:
            raise ValidationException("Question does not belong to this question set")

        ProgressService._upsert(
            db, user.id, data.question_set_id, data.question_id, data.is_correct, data.time_spent,
            data.last_question_index,
        )
        db.commit()
        return ProgressService.stats(db, user.id, data.question_set_id)

    @staticmethod
    def all_stats(db: Session, user_id: str) -> Dict[str, ProgressStats]:
        set_ids = [
            row[0]
            for row in db.query(UserProgress.question_set_id)
            .filter(UserProgress.user_id == user_id)
            .distinct()
            .all()
        ]
        return {set_id: ProgressService.stats(db, user_id, set_id) for set_id in set_ids}

    @staticmethod
    def stats_for_user(db: Session, viewer: User, user_id: str) -> Dict[str, ProgressStats]:
        if viewer.id != user_id and not viewer.is_admin:
            raise AuthorizationException("You can only view your own progress")
        if not db.query(User.id).filter(User.id == user_id).first():
            raise NotFoundException("User")
        return ProgressService.all_stats(db, user_id)

    @staticmethod
    def detail(db: Session, user: User, question_set_id: str) -> ProgressDetail:
        QuestionSetService.get(db, question_set_id)
        records = (
            db.query(UserProgress)
            .filter(UserProgress.user_id == user.id, UserProgress.question_set_id == question_set_id)
            .order_by(UserProgress.last_accessed.desc())
            .all()
        )
        return ProgressDetail(
            stats=ProgressService.stats(db, user.id, question_set_id),
            records=[ProgressEntry.model_validate(record) for record in records],
        )

    @staticmethod
    def reset(db: Session, user: User, question_set_id: str) -> ProgressStats:
        QuestionSetService.get(db, question_set_id)
        deleted = (
            db.query(UserProgress)
            .filter(UserProgress.user_id == user.id, UserProgress.question_set_id == question_set_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        logger.info(f"Reset {deleted} progress records of user {user.id} in {question_set_id}")
        return ProgressService.stats(db, user.id, question_set_id)

    @staticmethod
    def submit(db: Session, user: Optional[User], data: QuizSubmission) -> QuizResult:
        """
        Score answers against the stored options. Progress is persisted only
        for authenticated users; anonymous callers just get the score.
        """
        question_set: QuestionSet = QuestionSetService.get(db, data.question_set_id)
        if not PurchaseService.has_access(db, user, question_set):
            trial = question_set.trial_questions or 0
            allowed = {
                row[0]
                for row in db.query(Question.id)
                .filter(Question.question_set_id == question_set.id)
                .order_by(Question.order_index, Question.created_at)
                .limit(trial)
                .all()
            } if trial else set()
            if not set(data.answers).issubset(allowed):
                raise AuthorizationException("Purchase this question set to answer all questions")

        questions: List[Question] = (
            db.query(Question)
            .options(selectinload(Question.options))
            .filter(Question.question_set_id == question_set.id, Question.id.in_(list(data.answers)))
            .all()
        )
        if len(questions) != len(data.answers):
            raise ValidationException("Some answered questions do not belong to this question set")

        per_question_time = data.time_spent // len(questions) if questions else 0
        results = []
        for question in questions:
            correct_ids = sorted(option.id for option in question.options if option.is_correct)
            chosen = sorted(set(data.answers[question.id]))
            is_correct = chosen == correct_ids
            results.append(
                QuestionResult(question_id=question.id, is_correct=is_correct, correct_option_ids=correct_ids)
            )
            if user is not None:
                ProgressService._upsert(
                    db, user.id, question_set.id, question.id, is_correct, per_question_time
                )

        score = sum(1 for result in results if result.is_correct)
        stats = None
        if user is not None:
            db.commit()
            stats = ProgressService.stats(db, user.id, question_set.id)

        return QuizResult(
            question_set_id=question_set.id,
            score=score,
            total=len(results),
            accuracy=round(score / len(results) * 100, 2) if results else 0.0,
            results=results,
            persisted=user is not None,
            stats=stats,
        )

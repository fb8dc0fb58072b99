"""
Practice tracking models: per-question progress and the wrong-answer notebook
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from quizhub.core.database import Base
from quizhub.models.base import TimestampMixin, generate_uuid, utcnow


class UserProgress(TimestampMixin, Base):
    """Latest answer of a user to one question"""
    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "question_id"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    question_set_id = Column(
        String(36), ForeignKey("question_sets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    time_spent = Column(Integer, nullable=False, default=0)  # in seconds
    last_question_index = Column(Integer, nullable=True)
    last_accessed = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="progress")


class WrongAnswer(TimestampMixin, Base):
    """Snapshot of a question the user answered incorrectly"""
    __tablename__ = "wrong_answers"
    __table_args__ = (UniqueConstraint("user_id", "question_id"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    question_set_id = Column(
        String(36), ForeignKey("question_sets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)

    question = Column(Text, nullable=False)
    question_type = Column(String(20), nullable=False)
    options = Column(JSON, nullable=False, default=list)
    selected_option = Column(String(36), nullable=True)
    selected_options = Column(JSON, nullable=True)
    correct_option = Column(String(36), nullable=True)
    correct_options = Column(JSON, nullable=True)
    explanation = Column(Text, nullable=True)
    memo = Column(Text, nullable=True)

    user = relationship("User", back_populates="wrong_answers")

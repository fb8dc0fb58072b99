"""
Question bank models: question sets, questions and their options
"""

import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from quizhub.core.database import Base
from quizhub.models.base import TimestampMixin, generate_uuid, string_enum


class QuestionType(str, enum.Enum):
    """How many options of a question are correct"""
    SINGLE = "single"
    MULTIPLE = "multiple"


class QuestionSet(TimestampMixin, Base):
    """A named, optionally paid collection of questions"""
    __tablename__ = "question_sets"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=False, index=True)
    icon = Column(String(255), nullable=False, default="default")

    is_paid = Column(Boolean, nullable=False, default=False)
    price = Column(Numeric(10, 2), nullable=True)
    trial_questions = Column(Integer, nullable=True)

    is_featured = Column(Boolean, nullable=False, default=False)
    featured_category = Column(String(100), nullable=True)
    card_image = Column(String(500), nullable=True)

    # Denormalized; kept equal to len(questions) by QuestionSetService.refresh_question_count
    question_count = Column(Integer, nullable=False, default=0)

    # Relationships
    questions = relationship(
        "Question",
        back_populates="question_set",
        cascade="all, delete-orphan",
        order_by="Question.order_index",
    )
    purchases = relationship("Purchase", back_populates="question_set", cascade="all, delete-orphan")
    redeem_codes = relationship("RedeemCode", back_populates="question_set", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<QuestionSet {self.title}>"


class Question(TimestampMixin, Base):
    """Question model"""
    __tablename__ = "questions"
    __table_args__ = (Index("ix_questions_set_order", "question_set_id", "order_index"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    question_set_id = Column(
        String(36), ForeignKey("question_sets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text = Column(Text, nullable=False)
    question_type = Column(string_enum(QuestionType), nullable=False, default=QuestionType.SINGLE)
    explanation = Column(Text, nullable=False, default="")
    points = Column(Integer, nullable=False, default=1)
    difficulty = Column(Integer, nullable=True)
    time_limit = Column(Integer, nullable=True)  # in seconds
    order_index = Column(Integer, nullable=False, default=0)
    meta = Column("metadata", JSON, nullable=True)

    # Relationships
    question_set = relationship("QuestionSet", back_populates="questions")
    options = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="Option.order_index",
    )


class Option(Base):
    """Answer option of a question"""
    __tablename__ = "options"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    question_id = Column(
        String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    option_index = Column(String(5), nullable=False)
    order_index = Column(Integer, nullable=False, default=0)

    question = relationship("Question", back_populates="options")

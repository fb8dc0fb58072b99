"""
User model for QuizHub
"""

from sqlalchemy import JSON, Boolean, Column, String
from sqlalchemy.orm import relationship

from quizhub.core.database import Base
from quizhub.models.base import TimestampMixin, generate_uuid


class User(TimestampMixin, Base):
    """User account"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(30), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)

    # [{id, examType, examCode, examDate}]
    exam_countdowns = Column(JSON, default=list)

    # Relationships
    purchases = relationship("Purchase", back_populates="user", cascade="all, delete-orphan")
    progress = relationship("UserProgress", back_populates="user", cascade="all, delete-orphan")
    wrong_answers = relationship("WrongAnswer", back_populates="user", cascade="all, delete-orphan")
    redeemed_codes = relationship(
        "RedeemCode", back_populates="redeemer", foreign_keys="RedeemCode.used_by"
    )

    def __repr__(self) -> str:
        return f"<User {self.username}>"

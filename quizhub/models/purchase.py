"""
Entitlement models: purchases and redeem codes
"""

import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from quizhub.core.database import Base
from quizhub.models.base import TimestampMixin, generate_uuid, string_enum, utcnow


class PurchaseStatus(str, enum.Enum):
    """Purchase lifecycle"""
    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Purchase(TimestampMixin, Base):
    """Time-limited access of a user to a paid question set"""
    __tablename__ = "purchases"
    __table_args__ = (Index("ix_purchases_user_set", "user_id", "question_set_id"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    question_set_id = Column(
        String(36), ForeignKey("question_sets.id", ondelete="CASCADE"), nullable=False
    )
    amount = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(string_enum(PurchaseStatus), nullable=False, default=PurchaseStatus.PENDING)
    payment_method = Column(String(50), nullable=True)
    transaction_id = Column(String(255), nullable=True)
    purchase_date = Column(DateTime, nullable=False, default=utcnow)
    expiry_date = Column(DateTime, nullable=False)

    # Relationships
    user = relationship("User", back_populates="purchases")
    question_set = relationship("QuestionSet", back_populates="purchases")


class RedeemCode(TimestampMixin, Base):
    """Single-use code granting access to a question set"""
    __tablename__ = "redeem_codes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    code = Column(String(20), unique=True, nullable=False)
    question_set_id = Column(
        String(36), ForeignKey("question_sets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    validity_days = Column(Integer, nullable=False)
    expiry_date = Column(DateTime, nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)
    used_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    used_at = Column(DateTime, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    question_set = relationship("QuestionSet", back_populates="redeem_codes")
    redeemer = relationship("User", back_populates="redeemed_codes", foreign_keys=[used_by])
    creator = relationship("User", foreign_keys=[created_by])

"""
Purchase and access service
A paid question set is accessible while an active purchase has not expired
"""

import logging
import math
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from quizhub.core.exceptions import DuplicateException, ValidationException
from quizhub.models import Purchase, PurchaseStatus, QuestionSet, User
from quizhub.models.base import utcnow
from quizhub.schemas.purchase import AccessStatus, ActivePurchase, PurchaseCreate, PurchaseQuestionSet
from quizhub.services.question_sets import QuestionSetService

logger = logging.getLogger(__name__)

PURCHASE_VALIDITY_DAYS = 30


def remaining_days(expiry_date: datetime, now: Optional[datetime] = None) -> int:
    seconds = (expiry_date - (now or utcnow())).total_seconds()
    return max(0, math.ceil(seconds / 86400))


class PurchaseService:
    """Purchase service"""

    @staticmethod
    def active_purchase(db: Session, user_id: str, question_set_id: str) -> Optional[Purchase]:
        """The latest-expiring purchase that currently grants access, if any"""
        return (
            db.query(Purchase)
            .filter(
                Purchase.user_id == user_id,
                Purchase.question_set_id == question_set_id,
                Purchase.status == PurchaseStatus.ACTIVE,
                Purchase.expiry_date > utcnow(),
            )
            .order_by(Purchase.expiry_date.desc())
            .first()
        )

    @staticmethod
    def has_access(db: Session, user: Optional[User], question_set: QuestionSet) -> bool:
        if not question_set.is_paid:
            return True
        if user is None:
            return False
        if user.is_admin:
            return True
        return PurchaseService.active_purchase(db, user.id, question_set.id) is not None

    @staticmethod
    def check_access(db: Session, user: User, question_set_id: str) -> AccessStatus:
        question_set = QuestionSetService.get(db, question_set_id)
        if not question_set.is_paid:
            return AccessStatus(question_set_id=question_set.id, has_access=True, is_paid=False)

        purchase = PurchaseService.active_purchase(db, user.id, question_set.id)
        if purchase:
            return AccessStatus(
                question_set_id=question_set.id,
                has_access=True,
                is_paid=True,
                expiry_date=purchase.expiry_date,
                remaining_days=remaining_days(purchase.expiry_date),
            )

        return AccessStatus(
            question_set_id=question_set.id,
            has_access=bool(user.is_admin),
            is_paid=True,
            price=float(question_set.price) if question_set.price is not None else None,
        )

    @staticmethod
    def grant(
        db: Session,
        user_id: str,
        question_set_id: str,
        days: int,
        amount: Decimal = Decimal("0"),
        payment_method: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ) -> Purchase:
        """Add an active purchase to the session (caller commits)"""
        now = utcnow()
        purchase = Purchase(
            user_id=user_id,
            question_set_id=question_set_id,
            amount=amount,
            status=PurchaseStatus.ACTIVE,
            payment_method=payment_method,
            transaction_id=transaction_id,
            purchase_date=now,
            expiry_date=now + timedelta(days=days),
        )
        db.add(purchase)
        return purchase

    @staticmethod
    def create(db: Session, user: User, data: PurchaseCreate) -> Purchase:
        question_set = QuestionSetService.get(db, data.question_set_id)
        if not question_set.is_paid:
            raise ValidationException("This question set is free and cannot be purchased")
        if not question_set.price or question_set.price <= 0:
            raise ValidationException("This question set has no price and cannot be purchased")

        price = Decimal(str(question_set.price)).quantize(Decimal("0.01"))
        if Decimal(str(data.amount)).quantize(Decimal("0.01")) != price:
            raise ValidationException(
                "Payment amount does not match the price", details={"price": float(price)}
            )

        if PurchaseService.active_purchase(db, user.id, question_set.id):
            raise DuplicateException("An active purchase for this question set")

        purchase = PurchaseService.grant(
            db,
            user.id,
            question_set.id,
            PURCHASE_VALIDITY_DAYS,
            amount=price,
            payment_method=data.payment_method,
            transaction_id=data.transaction_id,
        )
        db.commit()
        db.refresh(purchase)
        logger.info(f"User {user.id} purchased question set {question_set.id}")
        return purchase

    @staticmethod
    def list_for_user(db: Session, user: User) -> List[Purchase]:
        return (
            db.query(Purchase)
            .options(joinedload(Purchase.question_set))
            .filter(Purchase.user_id == user.id)
            .order_by(Purchase.purchase_date.desc())
            .all()
        )

    @staticmethod
    def active_for_user(db: Session, user: User) -> List[ActivePurchase]:
        now = utcnow()
        purchases = (
            db.query(Purchase)
            .options(joinedload(Purchase.question_set))
            .filter(
                Purchase.user_id == user.id,
                Purchase.status == PurchaseStatus.ACTIVE,
                Purchase.expiry_date > now,
            )
            .order_by(Purchase.expiry_date.desc())
            .all()
        )
        result = []
        for purchase in purchases:
            entry = ActivePurchase.model_validate(
                {
                    **{c.name: getattr(purchase, c.name) for c in Purchase.__table__.columns},
                    "question_set": PurchaseQuestionSet.model_validate(purchase.question_set),
                    "remaining_days": remaining_days(purchase.expiry_date, now),
                }
            )
            result.append(entry)
        return result

"""
Redeem code service
Codes are single use; redemption flips is_used with a conditional UPDATE so
two concurrent redemptions cannot both succeed.
"""

import logging
import secrets
import string
from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from quizhub.core.exceptions import NotFoundException, ValidationException
from quizhub.models import Purchase, RedeemCode, User
from quizhub.models.base import utcnow
from quizhub.schemas.common import Page, PageParams, paginate
from quizhub.schemas.purchase import RedeemCodeGenerate, RedeemCodeResponse
from quizhub.services.purchases import PurchaseService
from quizhub.services.question_sets import QuestionSetService

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8


def generate_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


class RedeemCodeService:
    """Redeem code service"""

    @staticmethod
    def _unique_code(db: Session, taken: set) -> str:
        while True:
            code = generate_code()
            if code in taken:
                continue
            if not db.query(RedeemCode.id).filter(RedeemCode.code == code).first():
                taken.add(code)
                return code

    @staticmethod
    def generate(db: Session, admin: User, data: RedeemCodeGenerate) -> List[RedeemCode]:
        question_set = QuestionSetService.get(db, data.question_set_id)
        expiry_date = utcnow() + timedelta(days=data.validity_days)

        taken: set = set()
        codes = [
            RedeemCode(
                code=RedeemCodeService._unique_code(db, taken),
                question_set_id=question_set.id,
                validity_days=data.validity_days,
                expiry_date=expiry_date,
                created_by=admin.id,
            )
            for _ in range(data.quantity)
        ]
        db.add_all(codes)
        db.commit()
        logger.info(f"Generated {len(codes)} redeem codes for question set {question_set.id}")
        return codes

    @staticmethod
    def list_codes(
        db: Session,
        params: PageParams,
        is_used: Optional[bool] = None,
        question_set_id: Optional[str] = None,
    ) -> Page:
        query = db.query(RedeemCode).options(joinedload(RedeemCode.question_set))
        if is_used is not None:
            query = query.filter(RedeemCode.is_used.is_(is_used))
        if question_set_id:
            query = query.filter(RedeemCode.question_set_id == question_set_id)
        query = query.order_by(RedeemCode.created_at.desc(), RedeemCode.id)
        return paginate(query, params, RedeemCodeResponse)

    @staticmethod
    def redeem(db: Session, user: User, code: str) -> Tuple[RedeemCode, Purchase]:
        """
        Consume a code and grant access for its validity period.

        Raises:
            NotFoundException: unknown code
            ValidationException: code already used or expired
        """
        redeem_code = db.query(RedeemCode).filter(RedeemCode.code == code).first()
        if not redeem_code:
            raise NotFoundException("Redeem code")
        if redeem_code.is_used:
            raise ValidationException("This redeem code has already been used")

        now = utcnow()
        if redeem_code.expiry_date <= now:
            raise ValidationException("This redeem code has expired")

        claimed = (
            db.query(RedeemCode)
            .filter(RedeemCode.id == redeem_code.id, RedeemCode.is_used.is_(False))
            .update(
                {RedeemCode.is_used: True, RedeemCode.used_by: user.id, RedeemCode.used_at: now},
                synchronize_session=False,
            )
        )
        if claimed != 1:
            db.rollback()
            raise ValidationException("This redeem code has already been used")

        purchase = PurchaseService.grant(
            db,
            user.id,
            redeem_code.question_set_id,
            redeem_code.validity_days,
            payment_method="redeem_code",
            transaction_id=redeem_code.code,
        )
        db.commit()
        db.refresh(redeem_code)
        db.refresh(purchase)
        logger.info(f"User {user.id} redeemed code {redeem_code.id} for {redeem_code.question_set_id}")
        return redeem_code, purchase

    @staticmethod
    def redeemed_by(db: Session, user: User) -> List[RedeemCode]:
        return (
            db.query(RedeemCode)
            .options(joinedload(RedeemCode.question_set))
            .filter(RedeemCode.used_by == user.id)
            .order_by(RedeemCode.used_at.desc())
            .all()
        )

    @staticmethod
    def delete(db: Session, code_id: str) -> None:
        redeem_code = db.query(RedeemCode).filter(RedeemCode.id == code_id).first()
        if not redeem_code:
            raise NotFoundException("Redeem code")
        if redeem_code.is_used:
            raise ValidationException("A used redeem code cannot be deleted")
        db.delete(redeem_code)
        db.commit()

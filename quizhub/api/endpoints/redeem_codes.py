"""
Redeem code endpoints
Admins generate single-use codes; users redeem them for time-limited access
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from quizhub.core.database import get_db
from quizhub.core.logging import audit
from quizhub.core.security import get_current_user, require_admin
from quizhub.models import User
from quizhub.realtime.manager import ConnectionManager, get_notifier
from quizhub.schemas.common import PageParams, ok
from quizhub.schemas.purchase import (
    PurchaseResponse,
    RedeemCodeGenerate,
    RedeemCodeResponse,
    RedeemRequest,
    RedeemResult,
)
from quizhub.services.purchases import PurchaseService
from quizhub.services.redeem_codes import RedeemCodeService

router = APIRouter()


@router.post("/generate", status_code=status.HTTP_201_CREATED)
async def generate_codes(
    data: RedeemCodeGenerate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Generate ``quantity`` codes for a question set (admin)"""
    codes = RedeemCodeService.generate(db, current_user, data)
    audit("redeem_code.generate", current_user, target_id=data.question_set_id, quantity=len(codes))
    return ok([RedeemCodeResponse.model_validate(c) for c in codes], f"Generated {len(codes)} codes")


@router.get("")
async def list_codes(
    params: PageParams = Depends(),
    is_used: Optional[bool] = Query(None, alias="isUsed"),
    question_set_id: Optional[str] = Query(None, alias="questionSetId"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ok(RedeemCodeService.list_codes(db, params, is_used, question_set_id))


@router.post("/redeem")
async def redeem_code(
    data: RedeemRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Consume a code and unlock its question set"""
    code, purchase = RedeemCodeService.redeem(db, current_user, data.code)
    access = PurchaseService.check_access(db, current_user, code.question_set_id)
    await notifier.access_updated(current_user.id, access)
    result = RedeemResult(
        question_set_id=code.question_set_id,
        expiry_date=purchase.expiry_date,
        purchase=PurchaseResponse.model_validate(purchase),
    )
    return ok(result, "Redeem code applied")


@router.get("/user")
async def my_codes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    codes = RedeemCodeService.redeemed_by(db, current_user)
    return ok([RedeemCodeResponse.model_validate(c) for c in codes])


@router.delete("/{code_id}")
async def delete_code(
    code_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    RedeemCodeService.delete(db, code_id)
    audit("redeem_code.delete", current_user, target_id=code_id)
    return ok(message="Redeem code deleted")

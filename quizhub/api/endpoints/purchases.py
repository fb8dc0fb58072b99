"""
Purchase endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from quizhub.core.database import get_db
from quizhub.core.security import get_current_user
from quizhub.models import User
from quizhub.realtime.manager import ConnectionManager, get_notifier
from quizhub.schemas.common import ok
from quizhub.schemas.purchase import PurchaseCreate, PurchaseResponse
from quizhub.services.purchases import PurchaseService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_purchase(
    data: PurchaseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Buy 30 days of access to a paid question set"""
    purchase = PurchaseService.create(db, current_user, data)
    access = PurchaseService.check_access(db, current_user, purchase.question_set_id)
    await notifier.access_updated(current_user.id, access)
    return ok(PurchaseResponse.model_validate(purchase), "Purchase successful")


@router.get("")
async def list_purchases(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    purchases = PurchaseService.list_for_user(db, current_user)
    return ok([PurchaseResponse.model_validate(p) for p in purchases])


@router.get("/active")
async def list_active_purchases(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Purchases that grant access right now, with days remaining"""
    return ok(PurchaseService.active_for_user(db, current_user))


@router.get("/check/{question_set_id}")
async def check_access(
    question_set_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(PurchaseService.check_access(db, current_user, question_set_id))

"""Purchase and redeem code schemas"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from quizhub.models.purchase import PurchaseStatus
from quizhub.schemas.common import APIModel


class PurchaseCreate(APIModel):
    question_set_id: str
    payment_method: str = Field(..., min_length=1, max_length=50)
    amount: float = Field(..., ge=0)
    transaction_id: Optional[str] = None


class PurchaseQuestionSet(APIModel):
    id: str
    title: str
    category: str
    icon: str


class PurchaseResponse(APIModel):
    """Purchase response schema"""
    id: str
    user_id: str
    question_set_id: str
    amount: float
    status: PurchaseStatus
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    purchase_date: datetime
    expiry_date: datetime
    question_set: Optional[PurchaseQuestionSet] = None


class ActivePurchase(PurchaseResponse):
    remaining_days: int


class AccessStatus(APIModel):
    """Whether the caller may use every question of a set"""
    question_set_id: str
    has_access: bool
    is_paid: bool
    expiry_date: Optional[datetime] = None
    remaining_days: Optional[int] = None
    price: Optional[float] = None


class RedeemCodeGenerate(APIModel):
    question_set_id: str
    validity_days: int = Field(..., ge=1, le=3650)
    quantity: int = Field(1, ge=1, le=100)


class RedeemRequest(APIModel):
    code: str = Field(..., min_length=1, max_length=20)

    @field_validator("code")
    @classmethod
    def normalize(cls, value: str) -> str:
        return value.strip().upper()


class RedeemCodeResponse(APIModel):
    """Redeem code response schema"""
    id: str
    code: str
    question_set_id: str
    validity_days: int
    expiry_date: datetime
    is_used: bool
    used_by: Optional[str] = None
    used_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime
    question_set: Optional[PurchaseQuestionSet] = None


class RedeemResult(APIModel):
    question_set_id: str
    expiry_date: datetime
    purchase: PurchaseResponse

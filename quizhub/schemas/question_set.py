"""Question set schemas"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from quizhub.schemas.common import APIModel


class QuestionSetBase(APIModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    icon: str = "default"
    is_paid: bool = False
    price: Optional[float] = Field(None, ge=0)
    trial_questions: Optional[int] = Field(None, ge=0)
    is_featured: bool = False
    featured_category: Optional[str] = None
    card_image: Optional[str] = None


def check_paid_price(is_paid: bool, price: Optional[float]) -> None:
    if is_paid and not price:
        raise ValueError("A paid question set needs a price greater than 0")


class QuestionSetCreate(QuestionSetBase):
    """Question set creation schema"""

    @model_validator(mode="after")
    def paid_sets_need_price(self):
        check_paid_price(self.is_paid, self.price)
        return self


class QuestionSetUpdate(APIModel):
    """Partial update; omitted fields are left unchanged"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    icon: Optional[str] = None
    is_paid: Optional[bool] = None
    price: Optional[float] = Field(None, ge=0)
    trial_questions: Optional[int] = Field(None, ge=0)
    is_featured: Optional[bool] = None
    featured_category: Optional[str] = None
    card_image: Optional[str] = None


class FeaturedUpdate(APIModel):
    is_featured: bool
    featured_category: Optional[str] = None


class QuestionSetResponse(QuestionSetBase):
    """Question set response schema"""
    id: str
    description: str
    question_count: int
    created_at: datetime
    updated_at: datetime


class BulkQuestionSet(APIModel):
    """
    One entry of a bulk JSON upload. Questions stay loosely typed here and are
    normalised by the importer, which accepts historical field spellings.
    """
    id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=100)
    icon: str = "default"
    is_paid: bool = False
    price: Optional[float] = Field(None, ge=0)
    trial_questions: Optional[int] = Field(None, ge=0)
    questions: List[Dict[str, Any]] = []

    @model_validator(mode="after")
    def paid_sets_need_price(self):
        check_paid_price(self.is_paid, self.price)
        return self


class BulkUploadRequest(APIModel):
    question_sets: List[BulkQuestionSet] = Field(..., min_length=1)


class BulkUploadResult(APIModel):
    id: str
    title: str
    status: str
    question_count: int
    errors: List[str] = []


class FileImportResult(APIModel):
    """Outcome of a CSV/TXT question import"""
    question_set_id: str
    success: int
    failed: int
    question_count: int
    errors: List[str] = []

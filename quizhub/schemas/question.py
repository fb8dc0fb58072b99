"""Question and option schemas"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field, model_validator

from quizhub.models.question_set import QuestionType
from quizhub.schemas.common import APIModel


def check_option_set(question_type: QuestionType, options: List["OptionCreate"]) -> None:
    """Raise ValueError unless the options fit the question type"""
    if len(options) < 2:
        raise ValueError("A question needs at least 2 options")
    correct = sum(1 for option in options if option.is_correct)
    if question_type == QuestionType.SINGLE and correct != 1:
        raise ValueError("A single-choice question needs exactly one correct option")
    if question_type == QuestionType.MULTIPLE and correct < 1:
        raise ValueError("A multiple-choice question needs at least one correct option")


class OptionCreate(APIModel):
    text: str = Field(..., min_length=1)
    is_correct: bool = False
    option_index: Optional[str] = Field(None, max_length=5)


class OptionStandaloneCreate(OptionCreate):
    """Option created through /options"""
    question_id: str


class OptionUpdate(APIModel):
    text: Optional[str] = Field(None, min_length=1)
    is_correct: Optional[bool] = None
    option_index: Optional[str] = Field(None, max_length=5)


class OptionResponse(APIModel):
    id: str
    question_id: str
    text: str
    is_correct: bool
    option_index: str
    order_index: int


class QuestionFields(APIModel):
    text: str = Field(..., min_length=1)
    question_type: QuestionType = QuestionType.SINGLE
    explanation: str = ""
    points: int = Field(1, ge=0)
    difficulty: Optional[int] = Field(None, ge=1, le=5)
    time_limit: Optional[int] = Field(None, ge=0)
    order_index: Optional[int] = Field(None, ge=0)
    meta: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("meta", "metadata"), serialization_alias="metadata"
    )


class QuestionCreate(QuestionFields):
    """Question with its options; questionSetId comes from the body or the URL"""
    question_set_id: Optional[str] = None
    options: List[OptionCreate]

    @model_validator(mode="after")
    def check_options(self):
        check_option_set(self.question_type, self.options)
        return self


class QuestionUpdate(APIModel):
    """Partial update; ``options`` replaces the whole option list"""
    text: Optional[str] = Field(None, min_length=1)
    question_type: Optional[QuestionType] = None
    explanation: Optional[str] = None
    points: Optional[int] = Field(None, ge=0)
    difficulty: Optional[int] = Field(None, ge=1, le=5)
    time_limit: Optional[int] = Field(None, ge=0)
    order_index: Optional[int] = Field(None, ge=0)
    meta: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("meta", "metadata"), serialization_alias="metadata"
    )
    options: Optional[List[OptionCreate]] = None


class QuestionResponse(QuestionFields):
    """Question response schema"""
    id: str
    question_set_id: str
    order_index: int
    options: List[OptionResponse] = []
    created_at: datetime
    updated_at: datetime

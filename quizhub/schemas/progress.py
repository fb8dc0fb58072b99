"""Progress, quiz submission and wrong-answer schemas"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, StrictBool

from quizhub.schemas.common import APIModel


class ProgressRecord(APIModel):
    """One answered question"""
    question_set_id: str
    question_id: str
    is_correct: StrictBool
    time_spent: int = Field(0, ge=0)
    last_question_index: Optional[int] = Field(None, ge=0)


class ProgressStats(APIModel):
    question_set_id: str
    total_questions: int
    completed_questions: int
    correct_answers: int
    total_time_spent: int
    average_time_spent: float
    accuracy: float
    last_accessed: Optional[datetime] = None
    last_question_index: Optional[int] = None


class ProgressEntry(APIModel):
    id: str
    question_set_id: str
    question_id: str
    is_correct: bool
    time_spent: int
    last_accessed: datetime
    last_question_index: Optional[int] = None


class ProgressDetail(APIModel):
    stats: ProgressStats
    records: List[ProgressEntry]


class QuizSubmission(APIModel):
    """Answers keyed by question id, each a list of chosen option ids"""
    question_set_id: str
    answers: Dict[str, List[str]] = Field(..., min_length=1)
    time_spent: int = Field(0, ge=0)


class QuestionResult(APIModel):
    question_id: str
    is_correct: bool
    correct_option_ids: List[str]


class QuizResult(APIModel):
    question_set_id: str
    score: int
    total: int
    accuracy: float
    results: List[QuestionResult]
    persisted: bool
    stats: Optional[ProgressStats] = None


class WrongAnswerCreate(APIModel):
    question_id: str
    question_set_id: str
    question: str = Field(..., min_length=1)
    question_type: str = Field(..., min_length=1)
    options: List[Dict[str, Any]] = Field(..., min_length=1)
    selected_option: Optional[str] = None
    selected_options: Optional[List[str]] = None
    correct_option: Optional[str] = None
    correct_options: Optional[List[str]] = None
    explanation: Optional[str] = None
    memo: Optional[str] = None


class WrongAnswerMemo(APIModel):
    memo: Optional[str] = Field(None, max_length=5000)


class BatchDelete(APIModel):
    ids: List[str] = Field(..., min_length=1)


class WrongAnswerResponse(WrongAnswerCreate):
    """Wrong answer response schema"""
    id: str
    created_at: datetime
    updated_at: datetime

"""
User schemas for QuizHub
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from quizhub.schemas.common import APIModel
from quizhub.schemas.purchase import ActivePurchase
from quizhub.utils.validators import normalize_email, validate_username


class ExamCountdown(APIModel):
    """An upcoming exam the user is counting down to"""
    id: str
    exam_type: str = Field(..., max_length=100)
    exam_code: str = Field(..., max_length=100)
    exam_date: date


class UserRegister(APIModel):
    """User registration schema"""
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)

    @field_validator("username")
    @classmethod
    def check_username(cls, value: str) -> str:
        return validate_username(value)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return normalize_email(value)


class UserLogin(APIModel):
    """Login by username or email"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserProfileUpdate(APIModel):
    """Fields a user may change on their own account"""
    username: Optional[str] = Field(None, min_length=3, max_length=30)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=100)
    exam_countdowns: Optional[List[ExamCountdown]] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, value: Optional[str]) -> Optional[str]:
        return validate_username(value) if value is not None else value

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: Optional[str]) -> Optional[str]:
        return normalize_email(value) if value is not None else value


class UserAdminUpdate(UserProfileUpdate):
    """Admin update schema"""
    is_admin: Optional[bool] = None


class UserResponse(APIModel):
    """User response schema"""
    id: str
    username: str
    email: str
    is_admin: bool
    exam_countdowns: List[ExamCountdown] = []
    created_at: datetime

    @field_validator("exam_countdowns", mode="before")
    @classmethod
    def default_countdowns(cls, value):
        return value or []


class AuthResponse(APIModel):
    """Token plus the authenticated user"""
    user: UserResponse
    token: str
    token_type: str = "bearer"


class UserProfile(UserResponse):
    """Own account with the purchases that currently grant access"""
    active_purchases: List[ActivePurchase] = []

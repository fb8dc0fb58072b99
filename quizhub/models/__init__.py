"""
QuizHub Models Package
"""

from quizhub.models.homepage import HOMEPAGE_DEFAULTS, HomepageSettings, Theme
from quizhub.models.progress import UserProgress, WrongAnswer
from quizhub.models.purchase import Purchase, PurchaseStatus, RedeemCode
from quizhub.models.question_set import Option, Question, QuestionSet, QuestionType
from quizhub.models.user import User

__all__ = [
    "User",
    "QuestionSet", "Question", "Option", "QuestionType",
    "Purchase", "PurchaseStatus", "RedeemCode",
    "UserProgress", "WrongAnswer",
    "HomepageSettings", "HOMEPAGE_DEFAULTS", "Theme",
]

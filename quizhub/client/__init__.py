"""
Python client for the QuizHub API and notifier
"""

from quizhub.client.api import ApiError, QuizHubClient
from quizhub.client.subscription import NotifierSubscription, QuestionCountCache

__all__ = ["ApiError", "QuizHubClient", "NotifierSubscription", "QuestionCountCache"]

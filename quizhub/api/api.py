"""
API main router
Combines all endpoint routers under the API prefix
"""

from fastapi import APIRouter

from quizhub.api.endpoints import (
    health,
    homepage,
    options,
    progress,
    purchases,
    question_sets,
    questions,
    quiz,
    redeem_codes,
    users,
    wrong_answers,
)

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(question_sets.router, prefix="/question-sets", tags=["Question Sets"])
api_router.include_router(questions.router, prefix="/questions", tags=["Questions"])
api_router.include_router(options.router, prefix="/options", tags=["Options"])
api_router.include_router(purchases.router, prefix="/purchases", tags=["Purchases"])
api_router.include_router(redeem_codes.router, prefix="/redeem-codes", tags=["Redeem Codes"])
api_router.include_router(progress.router, prefix="/user-progress", tags=["Progress"])
api_router.include_router(quiz.router, prefix="/quiz", tags=["Quiz"])
api_router.include_router(wrong_answers.router, prefix="/wrong-answers", tags=["Wrong Answers"])
api_router.include_router(homepage.router, prefix="/homepage", tags=["Homepage"])
api_router.include_router(health.router, prefix="/health", tags=["System"])

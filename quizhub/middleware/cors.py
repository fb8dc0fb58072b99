"""
CORS configuration for QuizHub
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quizhub.core.config import settings


def setup_cors(app: FastAPI) -> None:
    """Allow the configured front-end origins, plus the notifier's public origin"""
    origins = settings.get_cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )

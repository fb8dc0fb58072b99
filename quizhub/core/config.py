"""
Core configuration for QuizHub Backend
Question-bank practice service
"""

import secrets
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application Settings
    APP_NAME: str = "QuizHub"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Question bank practice backend"
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")

    # API Settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "QuizHub Backend"

    # Security
    SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30  # 30 days
    ALGORITHM: str = "HS256"
    BCRYPT_ROUNDS: int = 12

    # Database
    DATABASE_URL: Optional[str] = Field(default=None)
    DB_DRIVER: str = Field(default="postgresql")
    DB_HOST: Optional[str] = Field(default=None)
    DB_PORT: str = Field(default="5432")
    DB_USER: Optional[str] = Field(default=None)
    DB_PASSWORD: Optional[str] = Field(default=None)
    DB_NAME: Optional[str] = Field(default=None)
    DB_POOL_SIZE: int = Field(default=10)
    DB_MAX_OVERFLOW: int = Field(default=20)
    DB_POOL_RECYCLE: int = Field(default=1800)
    AUTO_CREATE_TABLES: bool = Field(default=True)

    # Redis Cache
    REDIS_ENABLED: bool = Field(default=False)
    REDIS_URL: Optional[str] = Field(default=None)
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_DB: int = Field(default=0)
    CACHE_TTL: int = Field(default=300)  # 5 minutes

    # Real-time notifier
    SOCKET_PUBLIC_ORIGIN: Optional[str] = Field(default=None)
    SOCKET_PING_INTERVAL: int = Field(default=25)
    SOCKET_PING_TIMEOUT: int = Field(default=60)
    SOCKET_QUEUE_SIZE: int = Field(default=100)

    # Feature flags
    ALLOW_ANONYMOUS_PROGRESS: bool = Field(default=False)

    # Uploads
    UPLOAD_MAX_BYTES: int = Field(default=10 * 1024 * 1024)

    # CORS
    BACKEND_CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost:5173")

    # Sentry
    SENTRY_DSN: Optional[str] = Field(default=None)

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT_REQUESTS: int = Field(default=100)
    RATE_LIMIT_PERIOD: int = Field(default=60)  # seconds

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    LOG_FILE: Optional[str] = Field(default=None)
    LOG_MAX_BYTES: int = Field(default=10 * 1024 * 1024)
    LOG_BACKUP_COUNT: int = Field(default=5)

    SECURITY_HEADERS_ENABLED: bool = Field(default=True)

    class Config:
        env_file = ".env"
        case_sensitive = True

    def get_database_url(self) -> str:
        """Get database URL with proper formatting"""
        if self.DATABASE_URL:
            db_url = self.DATABASE_URL
            if db_url.startswith("postgres://"):
                db_url = db_url.replace("postgres://", "postgresql://", 1)
            return db_url

        # Build URL from components
        if all([self.DB_USER, self.DB_PASSWORD, self.DB_HOST, self.DB_NAME]):
            return (
                f"{self.DB_DRIVER}://{self.DB_USER}:{self.DB_PASSWORD}@"
                f"{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )

        # Default for development
        return "sqlite:///./quizhub.db"

    def get_redis_url(self) -> str:
        """Get Redis URL"""
        if self.REDIS_URL:
            return self.REDIS_URL
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    def get_cors_origins(self) -> list[str]:
        """Get CORS origins as list"""
        origins = []
        if self.BACKEND_CORS_ORIGINS:
            origins = [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]
        if self.SOCKET_PUBLIC_ORIGIN and self.SOCKET_PUBLIC_ORIGIN not in origins:
            origins.append(self.SOCKET_PUBLIC_ORIGIN)
        return origins

    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()

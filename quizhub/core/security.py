"""
Security utilities for authentication and authorization
Handles JWT tokens, password hashing, and permission checks
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from quizhub.core.config import settings
from quizhub.core.database import get_db
from quizhub.core.exceptions import AuthenticationException, AuthorizationException

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS
)

# HTTP Bearer scheme; missing credentials are reported by the dependencies below
security = HTTPBearer(auto_error=False)


class SecurityUtils:
    """Security utility functions"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a plain password against hashed password"""
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Hash a password using bcrypt"""
        return pwd_context.hash(password)

    @staticmethod
    def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Create JWT access token

        Args:
            data: Data to encode in token
            expires_delta: Token expiration time

        Returns:
            Encoded JWT token
        """
        to_encode = data.copy()

        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        expire = datetime.now(timezone.utc) + expires_delta

        to_encode.update({"exp": expire, "type": "access"})

        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        Decode JWT token

        Raises:
            AuthenticationException: If token is invalid or expired
        """
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            raise AuthenticationException("Could not validate credentials")

        if payload.get("type") != "access" or not payload.get("sub"):
            raise AuthenticationException("Invalid authentication credentials")
        return payload


def create_user_token(user) -> str:
    """Issue an access token for a user"""
    return SecurityUtils.create_access_token({"sub": user.id, "isAdmin": bool(user.is_admin)})


def get_user_id_from_token(token: str) -> str:
    """Return the user id a token was issued for"""
    return SecurityUtils.decode_token(token)["sub"]


def _load_user(db: Session, user_id: str):
    from quizhub.models import User

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationException("User no longer exists")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: Session = Depends(get_db),
):
    """
    Resolve the authenticated user from the bearer token

    Raises:
        AuthenticationException: missing, malformed or expired token
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationException("Authentication required")

    return _load_user(db, get_user_id_from_token(credentials.credentials))


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: Session = Depends(get_db),
):
    """Like get_current_user, but anonymous requests yield None"""
    if credentials is None or not credentials.credentials:
        return None

    return _load_user(db, get_user_id_from_token(credentials.credentials))


def require_admin(current_user=Depends(get_current_user)):
    """Dependency to require admin role"""
    if not current_user.is_admin:
        raise AuthorizationException("Admin access required")
    return current_user

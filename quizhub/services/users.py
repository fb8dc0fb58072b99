"""
User service for QuizHub
Registration, login and account maintenance
"""

import logging
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizhub.core.exceptions import AuthenticationException, DuplicateException, NotFoundException
from quizhub.core.security import SecurityUtils
from quizhub.models import User
from quizhub.schemas.common import Page, PageParams, paginate
from quizhub.schemas.user import UserAdminUpdate, UserProfileUpdate, UserRegister, UserResponse

logger = logging.getLogger(__name__)


class UserService:
    """User service"""

    @staticmethod
    def get(db: Session, user_id: str) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundException("User")
        return user

    @staticmethod
    def _ensure_unique(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[str] = None):
        if username:
            query = db.query(User.id).filter(func.lower(User.username) == username.lower())
            if exclude_id:
                query = query.filter(User.id != exclude_id)
            if query.first():
                raise DuplicateException("Username")
        if email:
            query = db.query(User.id).filter(User.email == email)
            if exclude_id:
                query = query.filter(User.id != exclude_id)
            if query.first():
                raise DuplicateException("Email")

    @staticmethod
    def _commit_unique(db: Session) -> None:
        # Concurrent writers can pass _ensure_unique; the unique indexes decide
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateException("Username or email")

    @staticmethod
    def register(db: Session, data: UserRegister) -> User:
        UserService._ensure_unique(db, data.username, data.email)
        user = User(
            username=data.username,
            email=data.email,
            hashed_password=SecurityUtils.get_password_hash(data.password),
            is_admin=False,
            exam_countdowns=[],
        )
        db.add(user)
        UserService._commit_unique(db)
        db.refresh(user)
        logger.info(f"User registered: {user.id}")
        return user

    @staticmethod
    def authenticate(db: Session, login: str, password: str) -> User:
        """Look up by username or email and check the password"""
        login = login.strip()
        user = (
            db.query(User)
            .filter(or_(User.username == login, User.email == login.lower()))
            .first()
        )
        if not user or not SecurityUtils.verify_password(password, user.hashed_password):
            raise AuthenticationException("Incorrect username or password")
        return user

    @staticmethod
    def update(db: Session, user: User, data: UserProfileUpdate) -> User:
        changes = data.model_dump(exclude_unset=True, mode="json")
        UserService._ensure_unique(db, changes.get("username"), changes.get("email"), exclude_id=user.id)

        password = changes.pop("password", None)
        if password:
            user.hashed_password = SecurityUtils.get_password_hash(password)
        for field, value in changes.items():
            if value is None:
                continue
            if field == "exam_countdowns":
                value = [
                    {"id": c["id"], "examType": c["exam_type"], "examCode": c["exam_code"], "examDate": c["exam_date"]}
                    for c in value
                ]
            setattr(user, field, value)

        UserService._commit_unique(db)
        db.refresh(user)
        return user

    @staticmethod
    def admin_update(db: Session, user_id: str, data: UserAdminUpdate) -> User:
        return UserService.update(db, UserService.get(db, user_id), data)

    @staticmethod
    def list_users(db: Session, params: PageParams, search: Optional[str] = None) -> Page:
        query = db.query(User)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(User.username.ilike(pattern), User.email.ilike(pattern)))
        return paginate(query.order_by(User.created_at.desc(), User.id), params, UserResponse)

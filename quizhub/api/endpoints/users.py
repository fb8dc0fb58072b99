"""
User endpoints
Registration, login, profile and admin account management
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from quizhub.core.database import get_db
from quizhub.core.logging import audit
from quizhub.core.security import create_user_token, get_current_user, require_admin
from quizhub.models import User
from quizhub.schemas.common import PageParams, ok
from quizhub.schemas.user import (
    AuthResponse,
    UserAdminUpdate,
    UserLogin,
    UserProfile,
    UserProfileUpdate,
    UserRegister,
    UserResponse,
)
from quizhub.services.purchases import PurchaseService
from quizhub.services.users import UserService

router = APIRouter()


def _auth_payload(user: User) -> AuthResponse:
    return AuthResponse(user=UserResponse.model_validate(user), token=create_user_token(user))


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(data: UserRegister, db: Session = Depends(get_db)):
    """Register new user"""
    user = UserService.register(db, data)
    return ok(_auth_payload(user), "Registration successful")


@router.post("/login")
async def login(data: UserLogin, db: Session = Depends(get_db)):
    """Login with username or email"""
    user = UserService.authenticate(db, data.username, data.password)
    return ok(_auth_payload(user), "Login successful")


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = UserProfile.model_validate(current_user)
    profile.active_purchases = PurchaseService.active_for_user(db, current_user)
    return ok(profile)


@router.put("/profile")
async def update_profile(
    data: UserProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update own account, including exam countdowns"""
    user = UserService.update(db, current_user, data)
    return ok(UserResponse.model_validate(user), "Profile updated")


@router.get("")
async def list_users(
    params: PageParams = Depends(),
    search: Optional[str] = Query(None, max_length=100),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List users (admin)"""
    return ok(UserService.list_users(db, params, search))


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ok(UserResponse.model_validate(UserService.get(db, user_id)))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    data: UserAdminUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Update any account (admin)"""
    user = UserService.admin_update(db, user_id, data)
    audit("user.update", current_user, target_id=user_id, fields=sorted(data.model_fields_set))
    return ok(UserResponse.model_validate(user), "User updated")

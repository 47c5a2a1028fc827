"""User profile, preferences and account management."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from coinfolio.database import get_db
from coinfolio.dependencies.auth import get_current_user
from coinfolio.models.user import User
from coinfolio.schemas.common import MessageResponse
from coinfolio.schemas.user import (
    CurrencyPreferenceUpdate,
    LanguagePreferenceUpdate,
    PasswordChange,
    UserProfile,
)
from coinfolio.services.auth_service import AuthService
from coinfolio.services.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _get_managed_user(user_id: str, current_user: User, db: Session) -> User:
    """Load a user the caller may manage: themselves, or anyone for an admin."""
    if current_user.id != user_id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only manage your own account",
        )
    return UserRepository(db).get_by_id(user_id)


@router.get("/me", response_model=UserProfile)
def get_profile(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.put("/me/currency", response_model=UserProfile)
def update_currency(
    data: CurrencyPreferenceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    """Set the preferred display currency (stored upper-case)."""
    current_user.preferred_currency = data.currency
    db.commit()
    db.refresh(current_user)
    return current_user


@router.put("/me/language", response_model=UserProfile)
def update_language(
    data: LanguagePreferenceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    """Set the preferred UI language (stored lower-case)."""
    current_user.preferred_language = data.language
    db.commit()
    db.refresh(current_user)
    return current_user


@router.put("/me/password", response_model=MessageResponse)
def change_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    """Change password after re-checking the current one."""
    if not AuthService.verify_password(data.current_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    current_user.password_hash = AuthService.hash_password(data.new_password)
    db.commit()
    logger.info(f"Password changed for user {current_user.id}")
    return {"message": "Password updated"}


@router.post("/{user_id}/disable", response_model=MessageResponse)
def disable_account(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    """Disable an account. Users may disable themselves; admins anyone but themselves."""
    if current_user.is_admin and current_user.id == user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admins cannot disable their own account",
        )
    user = _get_managed_user(user_id, current_user, db)

    user.is_active = False
    db.commit()
    logger.info(f"User {user_id} disabled by {current_user.id}")
    return {"message": "Account disabled"}


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_account(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    """Delete an account with its holdings, transactions and watchlist."""
    user = _get_managed_user(user_id, current_user, db)

    db.delete(user)
    db.commit()
    logger.info(f"User {user_id} deleted by {current_user.id}")
    return {"message": "Account deleted"}

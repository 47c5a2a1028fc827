"""Admin router for user management."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coinfolio.database import get_db
from coinfolio.dependencies.admin import get_admin_user
from coinfolio.models.user import User
from coinfolio.schemas.admin import RoleUpdate
from coinfolio.schemas.user import UserProfile
from coinfolio.services.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=list[UserProfile])
def list_users(
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
) -> list[User]:
    """List every user account."""
    return list(UserRepository(db).list_all())


@router.get("/users/{user_id}", response_model=UserProfile)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
) -> User:
    return UserRepository(db).get_by_id(user_id)


@router.put("/users/{user_id}/role", response_model=UserProfile)
def update_role(
    user_id: str,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
) -> User:
    """Grant or revoke admin rights."""
    user = UserRepository(db).get_by_id(user_id)

    user.role = data.role
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {admin.id} set role of user {user_id} to {data.role}")
    return user

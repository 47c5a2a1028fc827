"""Admin-only route guard."""

import logging

from fastapi import Depends, HTTPException, status

from coinfolio.dependencies.auth import get_current_user
from coinfolio.models.user import User

logger = logging.getLogger(__name__)


def get_admin_user(current_user: User = Depends(get_current_user)) -> User:
    """Pass the caller through if they hold the admin role, else 403.

    Usage:
        @router.get("/users")
        def list_users(admin: User = Depends(get_admin_user)):
            ...
    """
    if current_user.is_admin:
        return current_user

    logger.warning(f"User {current_user.id} denied admin access")
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")

"""Authentication dependencies for protected routes."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from coinfolio.config import settings
from coinfolio.database import get_db
from coinfolio.models.user import User
from coinfolio.services.auth_service import AuthService
from coinfolio.services.portfolio import OwnerContext
from coinfolio.services.repositories import UserRepository

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Get current authenticated user from a JWT.

    The token is read from the Authorization header, falling back to the
    session cookie set at login.

    Usage:
        @router.get("/protected")
        def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise _unauthorized("Not authenticated")

    payload = AuthService.decode_access_token(token)
    if not payload:
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get("sub")
    user = UserRepository(db).find_by_id(user_id) if user_id else None

    if not user:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


def get_owner_context(current_user: User = Depends(get_current_user)) -> OwnerContext:
    """Resolve the caller to the identity every ledger operation is scoped to.

    Usage:
        @router.get("/holdings")
        def list_holdings(owner: OwnerContext = Depends(get_owner_context)):
            ...
    """
    return OwnerContext(owner_id=current_user.id, role=current_user.role)

"""Authentication router."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from coinfolio.config import settings
from coinfolio.database import get_db
from coinfolio.dependencies.auth import get_current_user
from coinfolio.models.user import User
from coinfolio.rate_limiter import LOGIN_LIMIT, REGISTER_LIMIT, limiter
from coinfolio.schemas.auth import TokenResponse, UserInfo, UserLogin, UserRegister
from coinfolio.schemas.common import MessageResponse
from coinfolio.services.auth_service import AuthService
from coinfolio.services.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=UserInfo, status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
def register(request: Request, data: UserRegister, db: Session = Depends(get_db)) -> User:
    """Register a new user account."""
    users = UserRepository(db)
    if users.find_by_email(data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = users.create(data.email, AuthService.hash_password(data.password))
    db.commit()
    db.refresh(user)

    logger.info(f"User registered: {user.email}")
    return user


@router.post("/login", response_model=TokenResponse)
@limiter.limit(LOGIN_LIMIT)
def login(request: Request, response: Response, data: UserLogin, db: Session = Depends(get_db)) -> dict:
    """Authenticate and return an access token, also set as an HttpOnly cookie."""
    user = UserRepository(db).find_by_email(data.email)

    if not user:
        # Same work as a real check so timing does not reveal which emails exist
        AuthService.verify_password(data.password, AuthService.get_dummy_hash())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not AuthService.verify_password(data.password, user.password_hash):
        logger.warning(f"Failed login for {user.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    access_token = AuthService.create_access_token(user.id, role=user.role)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=access_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
    )

    logger.info(f"User logged in: {user.email}")
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": UserInfo.model_validate(user),
    }


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response) -> dict:
    """Clear the session cookie. Bearer tokens simply expire."""
    response.delete_cookie(settings.auth_cookie_name)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserInfo)
def get_me(current_user: User = Depends(get_current_user)) -> User:
    """Get current user info."""
    return current_user

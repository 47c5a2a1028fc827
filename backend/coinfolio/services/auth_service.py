"""Password hashing and access tokens.

Tokens are HS256 JWTs carrying the user id (sub) and role. The role claim is
informational; authorization always re-reads the user row.
"""

import logging
from datetime import UTC, datetime, timedelta
from functools import cache

import bcrypt
import jwt

from coinfolio.config import settings
from coinfolio.constants import UserRole

logger = logging.getLogger(__name__)

TOKEN_TYPE = "access"


@cache
def _dummy_hash() -> str:
    return bcrypt.hashpw(b"coinfolio-unknown-user", bcrypt.gensalt()).decode("utf-8")


class AuthService:
    """Stateless authentication helpers."""

    @staticmethod
    def get_dummy_hash() -> str:
        """Hash to verify against when the email is unknown, so login timing
        does not reveal which accounts exist."""
        return _dummy_hash()

    @staticmethod
    def hash_password(password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    @staticmethod
    def verify_password(password: str, hashed: str) -> bool:
        """Check password against a bcrypt hash. A malformed hash never matches."""
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Stored password hash is unusable: {e}")
            return False

    @staticmethod
    def create_access_token(
        user_id: str,
        role: str = UserRole.USER,
        expires_delta: timedelta | None = None,
    ) -> str:
        issued_at = datetime.now(UTC)
        lifetime = expires_delta if expires_delta is not None else timedelta(minutes=settings.access_token_expire_minutes)
        claims = {
            "sub": user_id,
            "role": role,
            "type": TOKEN_TYPE,
            "iat": issued_at,
            "exp": issued_at + lifetime,
        }
        return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    @staticmethod
    def decode_access_token(token: str) -> dict | None:
        """Claims of a valid, unexpired access token; None for anything else."""
        try:
            claims = jwt.decode(
                token,
                settings.jwt_secret_key,
                algorithms=[settings.jwt_algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected token: {e}")
            return None

        if claims.get("type") != TOKEN_TYPE:
            logger.debug(f"Rejected token of type {claims.get('type')!r}")
            return None
        return claims

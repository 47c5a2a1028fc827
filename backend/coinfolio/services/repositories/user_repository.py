"""User account data access. Emails are stored and looked up lower-cased."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from coinfolio.models import User

from .exceptions import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, user_id: str) -> User | None:
        return self._db.get(User, user_id)

    def get_by_id(self, user_id: str) -> User:
        """Get a user or raise NotFoundError."""
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self._db.query(User).filter(User.email == normalize_email(email)).first()

    def list_all(self) -> "Sequence[User]":
        """Every account, oldest first."""
        return self._db.query(User).order_by(User.created_at, User.email).all()

    def create(self, email: str, password_hash: str, **fields) -> User:
        """Insert an account; the caller commits."""
        user = User(email=normalize_email(email), password_hash=password_hash, **fields)
        self._db.add(user)
        self._db.flush()
        logger.debug(f"Created user {user.id}")
        return user

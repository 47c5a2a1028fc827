"""Database initialization script with seed data.

Usage:
    python -m coinfolio.init_db
"""

import logging
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from coinfolio.constants import UserRole
from coinfolio.database import Base, SessionLocal, engine
from coinfolio.models import Holding, User, WatchlistItem
from coinfolio.services.auth_service import AuthService

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@coinfolio.dev"
DEMO_PASSWORD = "Password123"


def create_tables() -> None:
    """Create all database tables."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created successfully")


def seed_data(db: Session) -> User | None:
    """Seed a demo user with two holdings and a watchlist entry.

    Does nothing if any user already exists.
    """
    if db.query(User).first() is not None:
        logger.info("Users already present, skipping seed")
        return None

    user = User(
        email=DEMO_EMAIL,
        password_hash=AuthService.hash_password(DEMO_PASSWORD),
        role=UserRole.USER,
        is_active=True,
    )
    db.add(user)
    db.flush()

    db.add_all(
        [
            Holding(
                owner_id=user.id,
                asset_id="bitcoin",
                quantity=Decimal("0.5"),
                cost_basis_price=Decimal("42000"),
                acquired_on=date.today() - timedelta(days=120),
                note="Demo position",
            ),
            Holding(
                owner_id=user.id,
                asset_id="ethereum",
                quantity=Decimal("4"),
                cost_basis_price=Decimal("2200"),
                acquired_on=date.today() - timedelta(days=45),
            ),
            WatchlistItem(owner_id=user.id, asset_id="solana", target_price=Decimal("150")),
        ]
    )
    db.commit()
    logger.info(f"Seeded demo user {DEMO_EMAIL}")
    return user


def init_db() -> None:
    create_tables()
    db = SessionLocal()
    try:
        seed_data(db)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    init_db()

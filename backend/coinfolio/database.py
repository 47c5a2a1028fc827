"""Ledger store: engine, session factory and the request-scoped session."""

import logging
from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from coinfolio.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _engine_options(database_url: str) -> dict:
    """Pool and isolation settings for the configured backend.

    PostgreSQL gets READ COMMITTED and a 5s lock timeout so a swap waiting on
    a locked holding row fails instead of hanging. pool_size + max_overflow
    caps concurrent ledger operations; a request that cannot get a
    connection within pool_timeout fails rather than queueing forever.
    """
    if not database_url.startswith("postgresql"):
        return {}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": 3600,
        "isolation_level": "READ COMMITTED",
        "connect_args": {"options": "-c lock_timeout=5000"},
    }


engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    **_engine_options(settings.database_url),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # rows returned after commit are read by the response models
)


def get_db() -> Generator[Session, None, None]:
    """
    One session per request, closed when the response is sent.

    Example:
        @router.get("/holdings")
        def list_holdings(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def close_engine() -> None:
    """Release every pooled connection. Called from the application shutdown hook."""
    engine.dispose()
    logger.info("Database connection pool disposed")

"""
Database connection management.
"""
from contextlib import contextmanager
from typing import Generator, Optional
import logging
from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import sessionmaker, Session

from shared.configs.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Get or create database engine.

    Args:
        database_url: Database URL (uses settings if None)

    Returns:
        SQLAlchemy engine
    """
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        # SQLite connections are shared across the request threadpool
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.debug
        )

    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        echo=settings.debug
    )


# Default database engine
engine = get_engine()

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session.

    Yields:
        Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of request handling.

    Example:
        with get_db_session() as db:
            users = db.query(User).all()
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        session.close()


def init_db() -> None:
    """Initialize database tables."""
    from shared.database.models import Base
    Base.metadata.create_all(bind=engine)

"""
Database configuration and session management.
"""

import logging
from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings

logger = logging.getLogger("mise.database")

# Create SQLAlchemy Base
Base = declarative_base()


def make_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Build an engine for ``url`` (defaults to settings.database_url).

    SQLite connections may be shared across threads and wait on a locked
    database instead of failing immediately; concurrent merges rely on it.
    """
    url = url or settings.database_url
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": settings.sqlite_busy_timeout_sec,
        }
    return create_engine(
        url,
        echo=settings.db_echo if echo is None else echo,
        future=True,
        connect_args=connect_args,
    )


# Create engine
engine = make_engine()

# Create session factory
SessionLocal = sessionmaker(bind=engine, future=True)


def init_database(bind: Optional[Engine] = None):
    """Initialize database schema"""
    # Import models so they register on Base.metadata
    from domain.models import shopping, normalization  # noqa: F401

    target = bind or engine
    with target.begin() as conn:
        Base.metadata.create_all(bind=conn)
    logger.info("Database tables created successfully")

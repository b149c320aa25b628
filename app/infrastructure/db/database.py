"""
Database configuration and session management.
"""

import logging
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import NullPool

from app.config import settings

logger = logging.getLogger(__name__)


def _engine_kwargs() -> dict:
    if settings.is_sqlite:
        # Requests may be served from a different thread than the one that opened the connection.
        return {"connect_args": {"check_same_thread": False}}
    return {"poolclass": NullPool}


# Create SQLAlchemy engine
engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_kwargs(),
)

# Create SessionLocal class
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Create declarative base
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function to get a database session.
    One transaction per request: commit on success, roll back on any error.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_tables(bind=None) -> None:
    """Create every table registered on the declarative base."""
    from app.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created")


def drop_tables(bind=None) -> None:
    from app.infrastructure.db import models  # noqa: F401

    Base.metadata.drop_all(bind=bind or engine)
    logger.info("Database tables dropped")

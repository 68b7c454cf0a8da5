"""Database engine, session factory and the request-scoped session dependency."""
from __future__ import annotations

import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Owns the connection pool for one application instance.

    Constructed once by the app factory, kept on ``app.state.db`` and
    disposed at shutdown.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine = create_engine(
            settings.DATABASE_URL,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            # Fail fast instead of queueing forever when the pool is exhausted.
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        return cls(engine)

    @classmethod
    def from_engine(cls, engine: Engine) -> "Database":
        return cls(engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def create_all(self) -> None:
        # Import models so every table is registered on Base.metadata.
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        logger.info("Closing database connection pool")
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """Yield a session per request; always closed, rolled back on error."""
    db = request.app.state.db.session()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

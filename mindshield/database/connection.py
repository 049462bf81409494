"""
Engine and session setup for the call record store.

The watcher pipeline and the HTTP API write to the same database from
different threads, so SQLite connections are shared across threads and wait
on locks instead of failing immediately.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Generator, Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session as SQLAlchemySession
from sqlalchemy.pool import QueuePool

from config.settings import settings

logger = logging.getLogger(__name__)

SQLITE_LOCK_TIMEOUT_SEC = 15


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": SQLITE_LOCK_TIMEOUT_SEC,
            }
        }

    db = settings.database
    return {
        "poolclass": QueuePool,
        "pool_size": db.pool_size,
        "max_overflow": db.max_overflow,
        "pool_timeout": db.pool_timeout,
        "pool_recycle": db.pool_recycle,
        "pool_pre_ping": True,
        "connect_args": {
            "options": "-c timezone=utc",
            "application_name": "mindshield_api",
        },
    }


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for a SQLite (development, tests) or PostgreSQL URL."""
    return create_engine(url, echo=echo, **_engine_options(url))


engine = build_engine(settings.database.url, echo=settings.database.echo)

# Records handed back by the repository stay readable after commit.
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@contextmanager
def session_scope(
    factory: Callable[[], SQLAlchemySession] = SessionLocal
) -> Iterator[SQLAlchemySession]:
    """Open a session for one unit of work; roll back if it raises."""
    db = factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[SQLAlchemySession, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    with session_scope() as db:
        yield db


def check_database_health() -> bool:
    """Run a trivial query; False if the database cannot be reached."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False
    return True


def create_tables(bind: Optional[Engine] = None):
    """Create the call record tables that do not exist yet."""
    from .models import Base
    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info("Database tables ready", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables(bind: Optional[Engine] = None):
    """Drop every table, including stored calls and flagged numbers. Tests and resets only."""
    from .models import Base
    Base.metadata.drop_all(bind=bind or engine)
    logger.warning("All database tables dropped")

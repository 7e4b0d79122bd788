"""
Engine and unit-of-work helpers for the AIconic database.

DATABASE_URL selects the backend. Production runs on PostgreSQL; any
sqlite URL (including the in-memory "sqlite://") gets a single shared
connection with foreign keys switched on, which is what the tests use.

The engine is created lazily on first use and can be swapped with
init_engine() / reset_engine().
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None

NOT_CONFIGURED_MESSAGE = "Database not configured. Set DATABASE_URL environment variable."


def get_database_url() -> Optional[str]:
    return os.getenv("DATABASE_URL")


def normalize_database_url(url: str) -> str:
    """Hosted Postgres providers still hand out postgres:// URLs."""
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def is_database_configured() -> bool:
    """True when an engine is live or DATABASE_URL is set."""
    return _engine is not None or bool(get_database_url())


def _build_engine(url: str) -> Engine:
    echo = os.getenv("SQL_ECHO", "false").lower() == "true"
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )
        _enable_sqlite_foreign_keys(engine)
        return engine
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,
        pool_pre_ping=True,
        echo=echo,
    )


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    # SQLite ignores ON DELETE CASCADE unless the pragma is set per connection
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_engine(database_url: Optional[str] = None) -> bool:
    """
    Create the engine and session factory.

    Args:
        database_url: URL to use instead of DATABASE_URL

    Returns:
        False when no URL is available or the engine could not be built
    """
    global _engine, _session_factory

    url = database_url or get_database_url()
    if not url:
        return False

    try:
        engine = _build_engine(normalize_database_url(url))
    except Exception as e:
        logger.error(f"Could not create database engine: {e}")
        return False

    _engine = engine
    _session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    logger.info(f"Database engine ready ({engine.dialect.name})")
    return True


def reset_engine() -> None:
    """Dispose of the engine; the next access rebuilds it from DATABASE_URL."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def get_engine() -> Optional[Engine]:
    if _engine is None:
        init_engine()
    return _engine


def get_session_factory() -> Optional[sessionmaker]:
    if _session_factory is None:
        init_engine()
    return _session_factory


@contextmanager
def get_db_session() -> Iterator[Session]:
    """
    One unit of work: commit when the block exits cleanly, roll back and
    re-raise otherwise.

        with get_db_session() as db:
            db.add(ChatSession(title="新会话"))
    """
    factory = get_session_factory()
    if factory is None:
        raise RuntimeError(NOT_CONFIGURED_MESSAGE)

    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_connection() -> Tuple[bool, str]:
    """Run SELECT 1 and report (healthy, message)."""
    engine = get_engine()
    if engine is None:
        return False, "Database not configured"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False, str(e)
    return True, "Connected"


def _require_engine() -> Engine:
    engine = get_engine()
    if engine is None:
        raise RuntimeError(NOT_CONFIGURED_MESSAGE)
    return engine


def create_all_tables() -> None:
    """Create missing tables for every ORM model (local runs and tests)."""
    from . import orm_models  # noqa: F401 - registers the models on Base

    Base.metadata.create_all(bind=_require_engine())
    logger.info("Database tables ensured")


def drop_all_tables() -> None:
    """Drop every ORM table. Test teardown only."""
    from . import orm_models  # noqa: F401

    Base.metadata.drop_all(bind=_require_engine())

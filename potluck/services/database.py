"""
Database connection and session management for Potluck Planner.

This module provides:
- Database engine creation and configuration
- Session factory for database operations
- Database initialization (create tables, seed default categories)
- Foreign key enforcement and WAL mode for SQLite
- Bounded retry for transient store failures
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Optional, TypeVar

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from potluck.models.base import Base
from potluck.utils.config import get_config
from potluck.utils.constants import (
    DEFAULT_CATEGORIES,
    STORE_RETRY_BACKOFF_SECONDS,
    STORE_WRITE_ATTEMPTS,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_engine: Optional[Engine] = None
_SessionFactory: Optional[sessionmaker] = None


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Set SQLite pragmas on every new connection.

    Enables foreign key constraints (needed for cascading deletes) and WAL
    mode so several app instances can share one database file.
    """
    if type(dbapi_connection).__module__.split(".")[0] not in ("sqlite3", "pysqlite2"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_database_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create and configure the database engine.

    Args:
        database_url: Optional database URL. If None, uses config default.
        echo: If True, log all SQL statements

    Returns:
        Configured SQLAlchemy Engine
    """
    if database_url is None:
        config = get_config()
        if config.database_url.startswith("sqlite:///") and ":memory:" not in config.database_url:
            config.ensure_directories()
        database_url = config.database_url

    logger.info(f"Creating database engine: {database_url}")

    if ":memory:" in database_url or "mode=memory" in database_url:
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def init_database(engine: Optional[Engine] = None) -> None:
    """
    Create all tables that don't exist yet.

    Safe to call multiple times.

    Args:
        engine: Optional engine to use. If None, uses global engine.
    """
    if engine is None:
        engine = get_engine()

    logger.info("Initializing database tables")

    # Register every model with Base.metadata
    from potluck import models  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Database tables initialized successfully")


def get_engine(force_recreate: bool = False) -> Engine:
    """
    Get the global database engine (singleton).

    Args:
        force_recreate: If True, recreate the engine even if one exists
    """
    global _engine

    if _engine is None or force_recreate:
        _engine = create_database_engine()

    return _engine


def get_session_factory() -> sessionmaker:
    """Get the global session factory."""
    global _SessionFactory

    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)

    return _SessionFactory


def get_session() -> Session:
    """Create a new database session."""
    session_factory = get_session_factory()
    return session_factory()


@contextmanager
def session_scope():
    """
    Provide a transactional scope for database operations.

    - Creates a new session
    - Commits on success
    - Rolls back on exception
    - Always closes the session

    Example:
        with session_scope() as session:
            session.add(Registration(...))
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def with_retry(
    operation: Callable[[], T],
    attempts: int = STORE_WRITE_ATTEMPTS,
    backoff: float = STORE_RETRY_BACKOFF_SECONDS,
) -> T:
    """
    Run a store operation, retrying on transient OperationalError.

    Writes are upserts or deletes by identity, so repeating one is safe.

    Args:
        operation: Zero-argument callable performing one transaction
        attempts: Maximum number of attempts (>= 1)
        backoff: Base delay in seconds, multiplied by the attempt number

    Returns:
        Whatever ``operation`` returns

    Raises:
        OperationalError: If the final attempt still fails
    """
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except OperationalError as e:
            if attempt >= attempts:
                raise
            logger.warning(f"Transient database error on attempt {attempt}, retrying: {e}")
            time.sleep(backoff * attempt)


def verify_database() -> bool:
    """
    Verify that the database is accessible and has tables.

    Returns:
        True if database is valid, False otherwise
    """
    try:
        tables = inspect(get_engine()).get_table_names()
        return all(t in tables for t in ("potlucks", "categories", "registrations"))
    except Exception as e:
        logger.error(f"Database verification failed: {e}")
        return False


def seed_default_categories(session: Optional[Session] = None) -> int:
    """
    Insert the default category catalog when the catalog is empty.

    Returns:
        Number of categories created
    """
    from potluck.models.category import Category

    def _impl(sess: Session) -> int:
        if sess.query(Category).count() > 0:
            return 0
        for data in DEFAULT_CATEGORIES:
            sess.add(Category(**data))
        sess.flush()
        logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories")
        return len(DEFAULT_CATEGORIES)

    if session is not None:
        return _impl(session)

    with session_scope() as sess:
        return _impl(sess)


def reset_database(confirm: bool = False) -> None:
    """
    Drop all tables and recreate the database.

    WARNING: This will delete all data!

    Raises:
        ValueError: If confirm is not True
    """
    if not confirm:
        raise ValueError("Must pass confirm=True to reset database. This will delete all data!")

    logger.warning("RESETTING DATABASE - ALL DATA WILL BE LOST")

    from potluck import models  # noqa: F401

    engine = get_engine()
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    logger.info("Tables recreated")


def close_connections() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _SessionFactory

    _SessionFactory = None

    if _engine is not None:
        _engine.dispose()
        _engine = None

    logger.info("Database connections closed")


def initialize_app_database() -> None:
    """
    Initialize the application database.

    Main entry point at startup: creates tables if needed and seeds the
    default category catalog into an empty database.
    """
    config = get_config()

    if config.database_exists():
        logger.info(f"Using existing database at: {config.database_url}")
    else:
        logger.info(f"Creating new database at: {config.database_url}")

    init_database(get_engine())
    seed_default_categories()

    if verify_database():
        logger.info("Database initialized and verified successfully")
    else:
        logger.warning("Database verification failed - tables may not exist")

"""
Database Management and Connection Handling

Engine and session factory construction, the FastAPI session dependency,
and schema creation for development environments.
"""

from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DatabaseSettings, settings
from .logging import get_logger

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(
    database_url: Optional[str] = None,
    db_settings: Optional[DatabaseSettings] = None,
) -> Engine:
    """
    Create a synchronous engine.

    SQLite engines share a single connection (StaticPool) and enforce
    foreign keys; other drivers get a sized connection pool.
    """
    db_settings = db_settings or settings.database
    url = database_url or db_settings.DATABASE_URL

    engine_kwargs = {
        "echo": db_settings.DATABASE_ECHO,
        "future": True,
    }

    if url.startswith("sqlite"):
        engine_kwargs.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })
    else:
        engine_kwargs.update({
            "pool_size": db_settings.DB_POOL_SIZE,
            "max_overflow": db_settings.DB_MAX_OVERFLOW,
            "pool_timeout": db_settings.DB_POOL_TIMEOUT,
            "pool_recycle": db_settings.DB_POOL_RECYCLE,
            "pool_pre_ping": True,
        })

    engine = create_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    logger.info("Created database engine", extra={"dialect": engine.dialect.name})
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


engine = create_db_engine()
SessionLocal = create_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables. Production deployments use migrations instead."""
    # Imported for its side effect of registering every model on the metadata
    import dockit.models  # noqa: F401
    from dockit.models.base import Base

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database schema initialized")

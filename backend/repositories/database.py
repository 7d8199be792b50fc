"""
Database configuration with connection pooling and an explicit store handle.

The handle is created once at process startup (see ``main.lifespan``) and
stored on ``app.state.store``; request handlers reach it through the
``get_db`` / ``get_session_factory`` dependencies instead of module globals.
"""

import time
from collections.abc import Iterator

from fastapi import Request
from loguru import logger
from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, QueuePool

from models.config import settings
from models.exceptions import StoreConnectionException

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str) -> Engine:
    """
    Create database engine with appropriate configuration.

    Uses QueuePool for PostgreSQL/production and NullPool for SQLite.
    NullPool creates a new connection per checkout, which lets the search
    fan-out threads open their own sessions safely.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,  # Verify connections before use
    )


class DatabaseHandle:
    """
    Owned connection to the relational store.

    Build it with :meth:`connect`, which verifies connectivity before
    returning, then share the instance with request handlers.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=engine
        )

    @classmethod
    def connect(
        cls,
        database_url: str,
        retries: int = 5,
        backoff: float = 2.0,
    ) -> "DatabaseHandle":
        """
        Create an engine and wait until the store answers.

        Args:
            database_url: SQLAlchemy URL
            retries: Total number of attempts (at least one is made)
            backoff: Seconds to sleep between attempts

        Returns:
            Connected handle

        Raises:
            StoreConnectionException: If every attempt failed
        """
        engine = create_db_engine(database_url)
        attempts = max(1, retries)
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                logger.info("Database connected successfully")
                return cls(engine)
            except SQLAlchemyError as e:
                last_error = e
                logger.warning(
                    f"Database connection attempt {attempt}/{attempts} failed: {e!r}"
                )
                if attempt < attempts:
                    time.sleep(backoff)

        engine.dispose()
        raise StoreConnectionException(
            f"Could not connect to the database after {attempts} attempts: {last_error!r}"
        )

    def session(self) -> Session:
        """Open a new session bound to this store."""
        return self.session_factory()

    def ping(self) -> bool:
        """Return True when a trivial query succeeds."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database ping failed: {e!r}")
            return False

    def create_schema(self) -> None:
        """Create all tables declared on ``Base``."""
        # Register every model on Base.metadata before create_all
        import repositories.db_models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_schema(self) -> None:
        import repositories.db_models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def get_store(request: Request) -> DatabaseHandle:
    """Return the store handle attached to the running application."""
    return request.app.state.store


def get_session_factory(request: Request) -> sessionmaker[Session]:
    """Session factory for work that needs its own sessions (e.g. threads)."""
    return get_store(request).session_factory


def get_db(request: Request) -> Iterator[Session]:
    """Get database session with automatic cleanup."""
    db = get_store(request).session()
    try:
        yield db
    finally:
        db.close()

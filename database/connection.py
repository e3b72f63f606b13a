import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from core.config import settings
from database.base import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, pool_size: int, echo: bool = False) -> Engine:
    """Create the pooled engine; SQLite gets a shared single connection when in memory."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    # Fixed-size pool; callers queue for a free connection
    return create_engine(
        url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=0,
        pool_pre_ping=True,
    )


class Database:
    """Storage gateway: owns the connection pool and hands out request-scoped sessions."""

    def __init__(self, url: Optional[str] = None, pool_size: Optional[int] = None, echo: Optional[bool] = None):
        self.url = url or settings.DATABASE_URL
        self.engine = build_engine(
            self.url,
            pool_size or settings.DB_POOL_SIZE,
            settings.DB_ECHO if echo is None else echo,
        )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def create_tables(self):
        # Register every mapped class on Base.metadata
        import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection failed: {str(e)}")
            return False

    def dispose(self):
        self.engine.dispose()
        logger.info("Database pool closed")


def get_database(request: Request) -> Database:
    return request.app.state.database


# Dependency to get a request-scoped database session
def get_db(request: Request) -> Iterator[Session]:
    with get_database(request).session() as db:
        yield db

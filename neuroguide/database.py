"""
Database engine and session management.

A Database owns one SQLAlchemy engine and its session factory. create_app
builds it from Settings and stores it on app.state, so every application
instance (and every test) has its own connection pool instead of a
process-wide global.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .db_models import Base

logger = logging.getLogger(__name__)


def _redact(url: str) -> str:
    return url.split("@")[-1] if "@" in url else url


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with pooling suited to the backend."""
    url = make_url(database_url)

    if url.get_backend_name() == "postgresql":
        return create_engine(
            database_url,
            poolclass=QueuePool,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=3600,
            echo=echo,
        )

    if url.get_backend_name() == "sqlite":
        in_memory = url.database in (None, "", ":memory:")
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            # In-memory databases live as long as their single connection
            poolclass=StaticPool if in_memory else None,
            echo=echo,
        )

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(database_url, pool_pre_ping=True, echo=echo)


class Database:
    """Connection resource shared by all requests of one application."""

    def __init__(self, database_url: str, echo: bool = False):
        self.url = database_url
        self.engine = build_engine(database_url, echo=echo)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info(f"Database configured: {_redact(database_url)}")

    @property
    def backend_name(self) -> str:
        return self.engine.url.get_backend_name()

    def init_db(self) -> None:
        """Create all tables. Called on application startup."""
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created/verified")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    def session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Context manager for sessions outside request handling.

        Usage:
            with database.session_scope() as db:
                user = db.query(DBUser).filter_by(email="a@b.c").first()
        """
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def check_health(self) -> dict:
        """Connectivity probe used by the health endpoint."""
        try:
            with self.session_scope() as db:
                db.execute(text("SELECT 1"))
            return {"connected": True, "type": self.backend_name}
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {"connected": False, "type": self.backend_name, "error": str(e)}

    def dispose(self) -> None:
        self.engine.dispose()

"""
Database connection and session management.
"""
import logging
from contextlib import contextmanager
from typing import Generator
from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from config.settings import settings
from .models import Base

logger = logging.getLogger(__name__)


def _ensure_database_exists(database_url: str):
    """Create the MySQL database if it does not already exist."""
    from urllib.parse import urlparse

    parsed = urlparse(database_url)
    db_name = parsed.path.lstrip("/")
    # Build a URL without the database name so we can connect to the server
    server_url = database_url.rsplit("/", 1)[0]
    tmp_engine = create_engine(server_url, pool_pre_ping=True)
    with tmp_engine.connect() as conn:
        conn.execute(text(f"CREATE DATABASE IF NOT EXISTS `{db_name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"))
        conn.commit()
    tmp_engine.dispose()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL with the options each backend needs."""
    if database_url.startswith("sqlite"):
        # Sessions are used from the request threadpool and the bootstrap thread
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )
    if database_url.startswith("mysql"):
        _ensure_database_exists(database_url)
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=echo,
    )


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


# Create engine
engine = build_engine(settings.database_url, echo=settings.debug)

# Create session factory
SessionLocal = make_session_factory(engine)


def init_db(bind: Engine = None):
    """Initialize database by creating all tables."""
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ready")


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Get database session from the application's own session factory.
    Use as dependency injection in FastAPI.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context(session_factory=None):
    """
    Context manager for database session.
    Use for non-FastAPI contexts.
    """
    db = (session_factory or SessionLocal)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

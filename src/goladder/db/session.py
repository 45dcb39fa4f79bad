"""
Database session management for the Go ladder.

Provides the SQLAlchemy engine and session factory. Uses the settings
from config.py. The engine is created on first use, so importing this
module never opens a connection.

Usage:
    # As a context manager (recommended for scripts)
    from goladder.db import get_session

    with get_session() as session:
        players = session.query(Player).all()
        session.add(new_player)
        # Commits automatically on exit, rolls back on exception

    # As a dependency (for FastAPI)
    from goladder.db.session import get_db

    @app.get("/players")
    def list_players(db: Session = Depends(get_db)):
        ...
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from goladder.config import settings


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create a SQLAlchemy engine.

    PostgreSQL gets a connection pool sized from settings; SQLite gets
    check_same_thread disabled so FastAPI worker threads can share it.
    Pre-ping verifies pooled connections before use.
    """
    url = database_url or settings.database_url
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.log_level == "DEBUG",
        )
    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        echo=settings.log_level == "DEBUG",  # Log SQL only in debug mode
    )


_engine: Optional[Engine] = None


def _get_engine() -> Engine:
    """Get or create the singleton engine instance."""
    global _engine
    if _engine is None:
        _engine = get_engine()
    return _engine


# Session factory; bound to the engine on first use
SessionLocal = sessionmaker(autoflush=False)


def _new_session() -> Session:
    if SessionLocal.kw.get("bind") is None:
        SessionLocal.configure(bind=_get_engine())
    return SessionLocal()


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Automatically commits on successful exit, rolls back on exception.
    This is the recommended way to use sessions in scripts.

    Example:
        with get_session() as session:
            outcome = apply_schedule(session, round_id, request)
            # Commits automatically when exiting the block

    Raises:
        Any exception from the database operation (after rollback)
    """
    session = _new_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency injection function for FastAPI.

    Request handlers commit explicitly; anything left uncommitted is
    discarded when the session closes.
    """
    db = _new_session()
    try:
        yield db
    finally:
        db.close()

"""
Database module for the Go ladder.

Provides SQLAlchemy ORM models, session management and transaction locks.

Usage:
    from goladder.db import get_session, Player, Game

    with get_session() as session:
        players = session.query(Player).all()
"""

from goladder.db.models import (
    Base,
    Game,
    Player,
    Presence,
    Round,
)
from goladder.db.session import SessionLocal, get_engine, get_session

__all__ = [
    # Base
    "Base",
    # Models
    "Player",
    "Round",
    "Presence",
    "Game",
    # Session
    "get_session",
    "get_engine",
    "SessionLocal",
]

"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides
shared fixtures for all tests.
"""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from goladder.db.models import Base, Player, Round
from goladder.rating.constants import RatingConfig

# Ratings of the reference ladder used throughout the tests
LADDER = {
    "A": 1000.0,
    "B": 1200.0,
    "C": 1300.0,
    "D": 1350.0,
    "E": 1400.0,
    "F": 1425.0,
}


@pytest.fixture(scope="session")
def test_engine():
    """
    Create a test database engine.

    Uses SQLite in-memory for fast tests that don't need
    PostgreSQL-specific features.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
    )
    return engine


@pytest.fixture(scope="session")
def tables(test_engine):
    """
    Create all tables for testing.

    This fixture runs once per test session.
    """
    Base.metadata.create_all(test_engine)
    yield
    Base.metadata.drop_all(test_engine)


@pytest.fixture
def db_session(test_engine, tables):
    """
    Create a database session for a test.

    Each test gets its own session with automatic rollback,
    ensuring tests don't affect each other.
    """
    connection = test_engine.connect()
    transaction = connection.begin()

    Session = sessionmaker(bind=connection)
    session = Session()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def config():
    """Default rating configuration, independent of environment settings."""
    return RatingConfig()


@pytest.fixture
def ladder_players(db_session):
    """The reference ladder A..F, keyed by name."""
    players = {
        name: Player(
            name=name,
            initial_rating=rating,
            current_rating=rating,
            default_schedule=True,
        )
        for name, rating in LADDER.items()
    }
    db_session.add_all(players.values())
    db_session.flush()
    return players


@pytest.fixture
def ladder_round(db_session):
    """One round on a fixed date."""
    round_ = Round(date=date(2026, 3, 4))
    db_session.add(round_)
    db_session.flush()
    return round_

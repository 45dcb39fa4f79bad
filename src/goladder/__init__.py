"""
Go Ladder - rating and pairing for a recurring Go ladder competition.

Main components:
- rating: rank and handicap codecs, rating calculator and ledger
- pairing: auto-pairing and custom game validation
- services: round scheduling, standings, season import/export
- db: SQLAlchemy models and sessions
- web: FastAPI JSON API
"""

__version__ = "1.0.0"

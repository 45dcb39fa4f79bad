"""
Rating engine.

- constants: RatingConfig, every tunable value of the scale and ledger
- rank: rating <-> kyu/dan labels
- handicap: handicap text codec and handicap_for()
- calculator: expected score and per-game deltas
- ledger: current ratings as a pure fold over the game log
- updater: writes the fold back to the players table
"""

from goladder.rating.calculator import RatingCalculator, RatingChange
from goladder.rating.constants import DEFAULT_CONFIG, ForfeitPolicy, RatingConfig
from goladder.rating.handicap import (
    EVEN,
    HandicapSpec,
    KomiVariant,
    format_handicap,
    handicap_for,
    normalize_handicap,
    parse_handicap,
)
from goladder.rating.ledger import LedgerGame, compute_ratings, current_rating, fold_games
from goladder.rating.rank import format_rating, rank_of, rating_of

__all__ = [
    "DEFAULT_CONFIG",
    "EVEN",
    "ForfeitPolicy",
    "HandicapSpec",
    "KomiVariant",
    "LedgerGame",
    "RatingCalculator",
    "RatingChange",
    "RatingConfig",
    "compute_ratings",
    "current_rating",
    "fold_games",
    "format_handicap",
    "format_rating",
    "handicap_for",
    "normalize_handicap",
    "parse_handicap",
    "rank_of",
    "rating_of",
]

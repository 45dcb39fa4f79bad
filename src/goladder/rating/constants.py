"""
Rating system constants.

All tuning values of the rating scale, the handicap table and the ledger
live in one immutable RatingConfig. Nothing in goladder.rating or
goladder.pairing reads settings directly: callers pass a RatingConfig in,
so tests (and a future season with a different scale) can vary them freely.

Scale:
  step: Rating points per rank. One kyu/dan grade is one step, and one
        handicap stone compensates for one step of difference.
  dan_threshold: Lowest rating that is 1 dan. The band of one step below it
        is 1 kyu.

Ledger:
  k_factor: Rating points at stake per game (K).
  spread: Logistic spread (how a rating gap maps to a win expectation).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from goladder.config import Settings


DEFAULT_STEP = 100.0
DEFAULT_DAN_THRESHOLD = 2050.0
DEFAULT_K_FACTOR = 32.0
DEFAULT_SPREAD = 400.0

# Rating given to a player created without one: the middle of 20 kyu
DEFAULT_INITIAL_RATING = 100.0


class ForfeitPolicy(str, Enum):
    """How games decided by default (and double losses) affect ratings."""

    # Rated exactly like a played win/loss
    SCORE = "score"
    # Left out of the rating fold entirely
    IGNORE = "ignore"


@dataclass(frozen=True)
class HandicapThresholds:
    """
    Fractions of a rank that select the komi variant in handicap_for().

    even: below this fraction of a rank, an even game with standard komi is
          played; at or above it black takes the first move without komi.
    reduced_komi: in a game with placement stones, at or above this
          fraction black additionally receives half a point.
    """
    even: float = 0.5
    reduced_komi: float = 0.5


@dataclass(frozen=True)
class RatingConfig:
    """
    Every tunable constant of the rating engine in one value.

    Usage:
        config = RatingConfig()                      # defaults
        config = RatingConfig(k_factor=20.0)         # tests / experiments
        config = RatingConfig.from_settings(settings)
    """
    # Scale
    step: float = DEFAULT_STEP
    dan_threshold: float = DEFAULT_DAN_THRESHOLD
    max_kyu: int = 30
    max_dan: int = 9

    # Ledger
    k_factor: float = DEFAULT_K_FACTOR
    spread: float = DEFAULT_SPREAD
    forfeit_policy: ForfeitPolicy = ForfeitPolicy.SCORE
    apply_per_round: bool = False
    max_drop_per_round: Optional[float] = None
    min_rating: Optional[float] = None

    # Handicap
    max_stones: int = 9
    handicap: HandicapThresholds = field(default_factory=HandicapThresholds)

    def __post_init__(self) -> None:
        if self.step <= 0:
            raise ValueError(f"step must be positive, got {self.step}")
        if self.spread <= 0:
            raise ValueError(f"spread must be positive, got {self.spread}")
        if self.max_kyu < 1 or self.max_dan < 1:
            raise ValueError("max_kyu and max_dan must be at least 1")
        if self.max_stones < 2:
            raise ValueError(f"max_stones must be at least 2, got {self.max_stones}")

    def with_changes(self, **changes) -> "RatingConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RatingConfig":
        """Build the engine configuration from application settings."""
        return cls(
            step=settings.rating_step,
            dan_threshold=settings.rating_dan_threshold,
            max_kyu=settings.max_kyu,
            max_dan=settings.max_dan,
            k_factor=settings.rating_k_factor,
            spread=settings.rating_spread,
            forfeit_policy=ForfeitPolicy(settings.forfeit_policy),
            apply_per_round=settings.apply_per_round,
            max_drop_per_round=settings.max_drop_per_round,
            min_rating=settings.min_rating,
            max_stones=settings.max_handicap_stones,
            handicap=HandicapThresholds(
                even=settings.handicap_even_threshold,
                reduced_komi=settings.handicap_reduced_komi_threshold,
            ),
        )


DEFAULT_CONFIG = RatingConfig()


def get_rating_config() -> RatingConfig:
    """RatingConfig built from the cached application settings."""
    from goladder.config import get_settings

    return RatingConfig.from_settings(get_settings())

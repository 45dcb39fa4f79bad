"""
Rank labels for ratings.

Go strength is written as kyu grades (30k weakest ... 1k) followed by dan
grades (1d, 2d, ...). The ladder keeps a continuous rating and derives the
label from it:

  rating >= R0:  dan = floor((rating - R0) / step) + 1
  rating <  R0:  kyu = ceil((R0 - rating) / step)

so the band of one step just below R0 is 1 kyu and the band just above it
is 1 dan. The kyu formula has no +1, unlike the dan one: ceil() already
puts R0 - step <= rating < R0 at 1k, and a +1 there would leave no rating
labelled 1k. Both ends clamp (max_kyu / max_dan), so every finite rating has a
label.

The inverse, rating_of(), returns the middle of a label's band. It is only
meant for display and for seeding ratings at import time, never for ordering.
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from goladder.errors import RankParseError
from goladder.rating.constants import DEFAULT_CONFIG, RatingConfig

_LABEL_RE = re.compile(r"^\s*(\d+)\s*(k|kyu|d|dan)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class Rank:
    """A kyu or dan grade."""
    grade: int
    is_dan: bool

    @property
    def label(self) -> str:
        return f"{self.grade}{'d' if self.is_dan else 'k'}"

    def __str__(self) -> str:
        return self.label


def rank_for_rating(rating: float, config: RatingConfig = DEFAULT_CONFIG) -> Rank:
    """
    Compute the grade for a rating.

    Args:
        rating: Any rating; infinities clamp to the extreme labels.
        config: Scale constants (step, dan threshold, clamps).

    Raises:
        ValueError: If rating is NaN.
    """
    if math.isnan(rating):
        raise ValueError("rating must be a number, got NaN")

    threshold = config.dan_threshold
    if rating >= threshold:
        if math.isinf(rating):
            return Rank(config.max_dan, True)
        dan = math.floor((rating - threshold) / config.step) + 1
        return Rank(min(dan, config.max_dan), True)

    if math.isinf(rating):
        return Rank(config.max_kyu, False)
    kyu = math.ceil((threshold - rating) / config.step)
    return Rank(max(1, min(kyu, config.max_kyu)), False)


def rank_of(rating: float, config: RatingConfig = DEFAULT_CONFIG) -> str:
    """
    Rank label for a rating.

    Example:
        >>> rank_of(100.0)
        '20k'
        >>> rank_of(2151.0)
        '2d'
    """
    return rank_for_rating(rating, config).label


def parse_rank(label: str) -> Rank:
    """Read '5k', '5 kyu', '2D' or '2 dan' into a Rank."""
    if not isinstance(label, str):
        raise RankParseError(str(label))
    match = _LABEL_RE.match(label)
    if not match:
        raise RankParseError(label)
    grade = int(match.group(1))
    if grade < 1:
        raise RankParseError(label)
    return Rank(grade, match.group(2).lower().startswith("d"))


def rating_of(label: str, config: RatingConfig = DEFAULT_CONFIG) -> float:
    """
    Rating in the middle of a rank label's band.

    Example:
        >>> rating_of("20k")
        100.0
        >>> rating_of("1d")
        2100.0

    Raises:
        RankParseError: If the label is malformed or beyond the configured
            max_kyu / max_dan.
    """
    rank = parse_rank(label)
    half = config.step / 2
    if rank.is_dan:
        if rank.grade > config.max_dan:
            raise RankParseError(label)
        return config.dan_threshold + (rank.grade - 1) * config.step + half
    if rank.grade > config.max_kyu:
        raise RankParseError(label)
    return config.dan_threshold - rank.grade * config.step + half


def format_rating(rating: float) -> str:
    """Rating rounded half-up to whole points, for display."""
    rounded = Decimal(str(rating)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    # Adding zero turns Decimal('-0') into Decimal('0')
    return str(rounded + 0)

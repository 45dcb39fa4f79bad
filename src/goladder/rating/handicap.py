"""
Handicap codec.

A handicap is a number of placement stones for black plus a komi variant.
It is written (and stored) as short text:

    0w6½   even game, white receives the standard 6.5 komi ("0w6.5" also read)
    0b0    no stones, no komi: black simply moves first ("0w0" also read)
    0b5    no stones, black receives half a point (reverse komi)
    Nb0    N placement stones, no komi (N >= 2; "Nw0" also read)
    Nb5    N placement stones, black receives half a point (reduced komi)

A single placement stone is never written: a one-rank gap is expressed
through komi instead (0b0 / 0b5).

The older numeric form is read as well: 0 = 0w6½, 1 = 0b0, 1.5 = 0b5,
N = Nb0 and N.5 = Nb5 for N >= 2.

format_handicap(parse_handicap(text)) == normalize_handicap(text) for every
text parse_handicap accepts.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum

from goladder.errors import HandicapParseError
from goladder.rating.constants import DEFAULT_CONFIG, RatingConfig

_STANDARD_RE = re.compile(r"^0w6(?:½|\.5)$")
_STONES_RE = re.compile(r"^(0|[2-9]|[1-9]\d+)(w0|b0|b5)$")
_NUMERIC_RE = re.compile(r"^(\d+)(?:\.([05]))?$")


class KomiVariant(str, Enum):
    """Komi part of a handicap. The value is the text suffix."""

    STANDARD = "w6½"
    ZERO = "b0"
    HALF = "b5"


@dataclass(frozen=True)
class HandicapSpec:
    """
    Placement stones plus komi variant.

    Attributes:
        stones: Placement stones for black; 0 or at least 2.
        komi: Komi variant. STANDARD is only valid without stones.
    """
    stones: int
    komi: KomiVariant

    def __post_init__(self) -> None:
        if self.stones < 0 or self.stones == 1:
            raise ValueError(f"stones must be 0 or at least 2, got {self.stones}")
        if self.komi is KomiVariant.STANDARD and self.stones != 0:
            raise ValueError("standard komi is only used in even games")

    @classmethod
    def even(cls) -> "HandicapSpec":
        return cls(0, KomiVariant.STANDARD)

    @classmethod
    def from_value(cls, value: float) -> "HandicapSpec":
        """
        Convert the numeric handicap form (0, 1, 1.5, 2, 2.5, ...).

        Raises:
            ValueError: For values that match no handicap (negative, 0.5,
                or not a multiple of one half).
        """
        doubled = value * 2
        if value < 0 or doubled != int(doubled):
            raise ValueError(f"no handicap has value {value}")
        whole = int(value)
        has_half = doubled % 2 == 1
        if whole == 0:
            if has_half:
                raise ValueError(f"no handicap has value {value}")
            return cls.even()
        if whole == 1:
            return cls(0, KomiVariant.HALF if has_half else KomiVariant.ZERO)
        return cls(whole, KomiVariant.HALF if has_half else KomiVariant.ZERO)

    @property
    def is_even(self) -> bool:
        return self.komi is KomiVariant.STANDARD

    @property
    def value(self) -> float:
        """Numeric handicap value (the older storage form)."""
        if self.is_even:
            return 0.0
        base = float(self.stones) if self.stones else 1.0
        return base + (0.5 if self.komi is KomiVariant.HALF else 0.0)

    @property
    def rank_advantage(self) -> float:
        """
        Black's advantage in ranks, used to shift the rating expectation.

        Each stone is worth one rank and half a point of komi half a rank.
        A game without stones where black moves first without paying komi
        is worth half a rank on its own.
        """
        if self.is_even:
            return 0.0
        advantage = float(self.stones)
        if self.komi is KomiVariant.HALF:
            advantage += 0.5
        if self.stones == 0:
            advantage += 0.5
        return advantage

    def __str__(self) -> str:
        return format_handicap(self)


EVEN = HandicapSpec.even()


def parse_handicap(text: str) -> HandicapSpec:
    """
    Parse handicap text into a HandicapSpec.

    Args:
        text: Handicap as typed by an admin or read from the database.
              Surrounding whitespace is ignored.

    Returns:
        The parsed HandicapSpec.

    Raises:
        HandicapParseError: If the text matches none of the accepted forms.

    Examples:
        >>> parse_handicap("3b5")
        HandicapSpec(stones=3, komi=<KomiVariant.HALF: 'b5'>)
        >>> parse_handicap("1.5")
        HandicapSpec(stones=0, komi=<KomiVariant.HALF: 'b5'>)
    """
    if not isinstance(text, str):
        raise HandicapParseError(str(text))
    raw = text.strip()

    if _STANDARD_RE.match(raw):
        return EVEN

    match = _STONES_RE.match(raw)
    if match:
        stones = int(match.group(1))
        komi = KomiVariant.HALF if match.group(2) == "b5" else KomiVariant.ZERO
        return HandicapSpec(stones, komi)

    match = _NUMERIC_RE.match(raw)
    if match:
        value = int(match.group(1)) + (0.5 if match.group(2) == "5" else 0.0)
        try:
            return HandicapSpec.from_value(value)
        except ValueError:
            raise HandicapParseError(text) from None

    raise HandicapParseError(text)


def format_handicap(spec: HandicapSpec) -> str:
    """Canonical text for a handicap, e.g. '0w6½', '0b5' or '4b0'."""
    return f"{spec.stones}{spec.komi.value}"


def normalize_handicap(text: str) -> str:
    """Canonical form of handicap text ('2' -> '2b0', '0w6.5' -> '0w6½')."""
    return format_handicap(parse_handicap(text))


def handicap_for(
    rating_a: float,
    rating_b: float,
    config: RatingConfig = DEFAULT_CONFIG,
) -> HandicapSpec:
    """
    Handicap for a game between two ratings.

    The gap is measured in ranks: x = |a - b| / step. Whole ranks become
    placement stones (capped at config.max_stones) and the remaining
    fraction picks the komi variant using config.handicap thresholds:

        x < 1:   even game below the even threshold, else 0b0
        1 <= x < 2:  0b5 (one stone is never written)
        x >= 2:  floor(x) stones, plus half a point of komi when the
                 fraction reaches the reduced-komi threshold

    Example:
        >>> str(handicap_for(1000, 1200))
        '2b0'
    """
    ranks = abs(rating_a - rating_b) / config.step
    whole = math.floor(ranks)
    fraction = ranks - whole
    thresholds = config.handicap

    if whole == 0:
        if fraction < thresholds.even:
            return EVEN
        return HandicapSpec(0, KomiVariant.ZERO)
    if whole == 1:
        return HandicapSpec(0, KomiVariant.HALF)
    if whole >= config.max_stones:
        return HandicapSpec(config.max_stones, KomiVariant.ZERO)
    if fraction < thresholds.reduced_komi:
        return HandicapSpec(whole, KomiVariant.ZERO)
    return HandicapSpec(whole, KomiVariant.HALF)

"""
Rating calculator for a single Go game.

Implements a logistic (Elo-style) update adapted for handicap games:

  Expected score: E_W = 1 / (1 + 10^((R_B' - R_W) / S))
  Rating change:  delta = K * (actual - expected)

Where:
  R_W = White's rating before the game
  R_B' = Black's rating before the game, raised by the handicap:
         R_B + rank_advantage * step
  K = Rating points at stake per game
  S = Spread (how a rating gap maps to a win expectation)

The handicap only shifts the expectation. The delta itself is applied to
the real ratings, so a correctly handicapped game between players of any
strength is a coin flip for rating purposes.
"""

from dataclasses import dataclass
from typing import Optional

from goladder.rating.constants import DEFAULT_CONFIG, RatingConfig
from goladder.rating.handicap import EVEN, HandicapSpec
from goladder.results import GameResult


@dataclass
class RatingChange:
    """
    Result of rating one game.

    Holds everything needed to explain a game's effect on both ratings.
    """
    # Ratings before the game
    white_before: float
    black_before: float

    # Expected scores (handicap already applied)
    expected_white: float
    expected_black: float

    # Actual scores (1 / 0.5 / 0)
    actual_white: float
    actual_black: float

    # Rating changes
    white_delta: float
    black_delta: float

    result: GameResult
    handicap: HandicapSpec = EVEN

    game_id: Optional[int] = None
    white_id: Optional[int] = None
    black_id: Optional[int] = None

    @property
    def white_after(self) -> float:
        return self.white_before + self.white_delta

    @property
    def black_after(self) -> float:
        return self.black_before + self.black_delta

    @property
    def was_upset(self) -> bool:
        """Whether the side expected to lose won."""
        colour = self.result.winner_colour()
        if colour == "white":
            return self.expected_white < 0.5
        if colour == "black":
            return self.expected_black < 0.5
        return False

    def __repr__(self) -> str:
        return (
            f"<RatingChange(game={self.game_id}, "
            f"W: {self.white_before:.0f} {self.white_delta:+.1f}, "
            f"B: {self.black_before:.0f} {self.black_delta:+.1f}, "
            f"result={self.result.value}, handicap={self.handicap})>"
        )


def expected_score(rating: float, opponent_rating: float, spread: float) -> float:
    """
    Logistic expectation of `rating` against `opponent_rating`.

    Extreme gaps saturate instead of overflowing.
    """
    try:
        return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / spread))
    except OverflowError:
        return 0.0 if opponent_rating > rating else 1.0


class RatingCalculator:
    """
    Calculates rating changes for Go games.

    Usage:
        calculator = RatingCalculator(RatingConfig(k_factor=20))

        change = calculator.calculate(
            white_rating=1200.0,
            black_rating=1000.0,
            result=GameResult.WHITE_WINS,
            handicap=parse_handicap("2b0"),
        )
        print(change.white_delta, change.black_delta)
    """

    def __init__(self, config: RatingConfig = DEFAULT_CONFIG):
        self.config = config

    def black_effective_rating(self, black_rating: float, handicap: HandicapSpec) -> float:
        """Black's rating as seen by the expectation, handicap included."""
        return black_rating + handicap.rank_advantage * self.config.step

    def win_probability(
        self,
        white_rating: float,
        black_rating: float,
        handicap: HandicapSpec = EVEN,
    ) -> float:
        """Expected score for white."""
        return expected_score(
            white_rating,
            self.black_effective_rating(black_rating, handicap),
            self.config.spread,
        )

    def calculate(
        self,
        white_rating: float,
        black_rating: float,
        result: GameResult,
        handicap: HandicapSpec = EVEN,
    ) -> RatingChange:
        """
        Rating changes for both players after one decided game.

        Every result is scored from its per-side score: wins 1, jigo 0.5,
        losses (including BothLose for both sides) 0. Whether forfeits are
        rated at all is the ledger's decision, not the calculator's.
        """
        k = self.config.k_factor
        expected_white = self.win_probability(white_rating, black_rating, handicap)
        expected_black = 1.0 - expected_white
        actual_white = result.score_for_white()
        actual_black = result.score_for_black()

        return RatingChange(
            white_before=white_rating,
            black_before=black_rating,
            expected_white=expected_white,
            expected_black=expected_black,
            actual_white=actual_white,
            actual_black=actual_black,
            white_delta=k * (actual_white - expected_white),
            black_delta=k * (actual_black - expected_black),
            result=result,
            handicap=handicap,
        )

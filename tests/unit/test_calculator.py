"""
Unit tests for the rating calculator.

Tests the per-game logic to ensure:
- Equal players split K evenly
- Changes are zero-sum except for double losses
- Handicaps shift the expectation, not the size of K
- Extreme gaps do not overflow
"""

import pytest

from goladder.rating.calculator import RatingCalculator, expected_score
from goladder.rating.constants import RatingConfig
from goladder.rating.handicap import EVEN, parse_handicap
from goladder.results import GameResult


class TestRatingCalculator:
    """Tests for RatingCalculator."""

    @pytest.fixture
    def calculator(self):
        return RatingCalculator(RatingConfig())

    def test_equal_ratings(self, calculator):
        change = calculator.calculate(1500.0, 1500.0, GameResult.WHITE_WINS)
        assert change.expected_white == pytest.approx(0.5)
        assert change.white_delta == pytest.approx(16.0)
        assert change.black_delta == pytest.approx(-16.0)

    @pytest.mark.parametrize("result", [
        GameResult.WHITE_WINS,
        GameResult.BLACK_WINS,
        GameResult.JIGO,
        GameResult.WHITE_WINS_BY_DEFAULT,
        GameResult.BLACK_WINS_BY_DEFAULT,
    ])
    def test_zero_sum(self, calculator, result):
        change = calculator.calculate(1700.0, 1420.0, result)
        assert change.white_delta + change.black_delta == pytest.approx(0.0)

    def test_both_lose_costs_both(self, calculator):
        change = calculator.calculate(1300.0, 1250.0, GameResult.BOTH_LOSE)
        assert change.white_delta < 0
        assert change.black_delta < 0
        assert change.white_delta + change.black_delta == pytest.approx(-32.0)

    def test_favourite_gains_less(self, calculator):
        favourite = calculator.calculate(1800.0, 1600.0, GameResult.WHITE_WINS)
        underdog = calculator.calculate(1800.0, 1600.0, GameResult.BLACK_WINS)
        assert favourite.white_delta < underdog.black_delta
        assert underdog.was_upset
        assert not favourite.was_upset

    def test_correct_handicap_is_coin_flip(self, calculator):
        """Two stones for a 200 point gap makes both sides even."""
        change = calculator.calculate(
            1200.0, 1000.0, GameResult.WHITE_WINS, parse_handicap("2b0")
        )
        assert change.expected_white == pytest.approx(0.5)
        assert change.white_delta == pytest.approx(16.0)

    def test_handicap_lowers_white_expectation(self, calculator):
        even = calculator.win_probability(1300.0, 1000.0, EVEN)
        stones = calculator.win_probability(1300.0, 1000.0, parse_handicap("2b5"))
        assert stones < even

    def test_k_factor(self):
        calculator = RatingCalculator(RatingConfig(k_factor=10.0))
        change = calculator.calculate(1500.0, 1500.0, GameResult.BLACK_WINS)
        assert change.black_delta == pytest.approx(5.0)

    def test_after_values(self, calculator):
        change = calculator.calculate(1200.0, 1000.0, GameResult.JIGO)
        assert change.white_after == pytest.approx(1200.0 + change.white_delta)
        assert change.black_after == pytest.approx(1000.0 + change.black_delta)
        assert change.white_delta < 0 < change.black_delta


class TestExpectedScore:
    def test_symmetry(self):
        assert expected_score(1200, 1000, 400) + expected_score(1000, 1200, 400) == pytest.approx(1.0)

    def test_known_value(self):
        # 400 points at spread 400 is 10:1
        assert expected_score(1400, 1000, 400) == pytest.approx(10 / 11)

    def test_extreme_gap_saturates(self):
        assert expected_score(0.0, 1e6, 400.0) == 0.0
        assert expected_score(1e6, 0.0, 400.0) == pytest.approx(1.0)

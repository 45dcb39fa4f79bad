"""Tests for settings and the rating configuration built from them."""

import pytest
from pydantic import ValidationError

from goladder.config import Settings
from goladder.rating.constants import ForfeitPolicy, HandicapThresholds, RatingConfig


class TestSettings:
    def test_log_level_normalised(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_log_level_invalid(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_forfeit_policy_invalid(self):
        with pytest.raises(ValidationError):
            Settings(forfeit_policy="sometimes")

    def test_step_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(rating_step=0)

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("GOLADDER_RATING_K_FACTOR", "20")
        assert Settings().rating_k_factor == 20.0


class TestRatingConfig:
    def test_from_settings(self):
        settings = Settings(
            rating_step=50.0,
            rating_k_factor=24.0,
            forfeit_policy="IGNORE",
            max_handicap_stones=6,
            handicap_even_threshold=0.4,
            min_rating=0.0,
        )
        config = RatingConfig.from_settings(settings)
        assert config.step == 50.0
        assert config.k_factor == 24.0
        assert config.forfeit_policy is ForfeitPolicy.IGNORE
        assert config.max_stones == 6
        assert config.handicap == HandicapThresholds(even=0.4, reduced_komi=0.5)
        assert config.min_rating == 0.0

    @pytest.mark.parametrize("changes", [
        {"step": 0.0},
        {"spread": -1.0},
        {"max_kyu": 0},
        {"max_stones": 1},
    ])
    def test_invalid(self, changes):
        with pytest.raises(ValueError):
            RatingConfig(**changes)

    def test_with_changes(self):
        config = RatingConfig().with_changes(k_factor=10.0)
        assert config.k_factor == 10.0
        assert config.step == RatingConfig().step

"""
Configuration management for the Go ladder.

Uses Pydantic Settings to load configuration from environment variables
with sensible defaults for development. The database URL and other
deployment values should be set via environment variables or a .env file.

Rating constants are also read here, but the engine never reads them as
globals: they are turned into an explicit RatingConfig value
(see goladder.rating.constants) that is passed into every codec, ledger
and pairing call.

Usage:
    from goladder.config import settings
    print(settings.database_url)
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can be set directly or via a .env file
    in the project root directory. Names are prefixed with GOLADDER_,
    e.g. GOLADDER_DATABASE_URL.
    """

    model_config = SettingsConfigDict(
        env_prefix="goladder_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ==========================================================================
    # Database Configuration
    # ==========================================================================

    database_url: str = Field(
        default="sqlite:///goladder.db",
        description="SQLAlchemy URL of the ladder database (SQLite or PostgreSQL)",
    )
    db_pool_size: int = Field(
        default=5,
        description="Number of connections to keep in the pool (PostgreSQL only)",
    )
    db_max_overflow: int = Field(
        default=10,
        description="Max additional connections beyond pool_size (PostgreSQL only)",
    )

    # ==========================================================================
    # Rating Scale
    # ==========================================================================

    rating_step: float = Field(
        default=100.0,
        description="Rating points per rank (one kyu/dan grade, one handicap stone)",
    )
    rating_dan_threshold: float = Field(
        default=2050.0,
        description="Lowest rating that counts as 1 dan",
    )
    max_kyu: int = Field(default=30, description="Weakest kyu label ever shown")
    max_dan: int = Field(default=9, description="Strongest dan label ever shown")

    # ==========================================================================
    # Rating Ledger
    # ==========================================================================

    rating_k_factor: float = Field(
        default=32.0,
        description="K factor: rating points at stake per game",
    )
    rating_spread: float = Field(
        default=400.0,
        description="Rating gap at which the stronger side is 10:1 favourite",
    )
    forfeit_policy: str = Field(
        default="score",
        description="'score' rates games won by default like played games, 'ignore' skips them",
    )
    apply_per_round: bool = Field(
        default=False,
        description="Rate every game of a round from the ratings at the start of the round",
    )
    max_drop_per_round: Optional[float] = Field(
        default=None,
        description="Largest rating loss applied in one round (requires apply_per_round)",
    )
    min_rating: Optional[float] = Field(
        default=None,
        description="Floor below which no rating can fall",
    )

    # ==========================================================================
    # Handicap
    # ==========================================================================

    max_handicap_stones: int = Field(
        default=9,
        description="Largest number of placement stones given by auto-pairing",
    )
    handicap_even_threshold: float = Field(
        default=0.5,
        description="Fraction of a rank below which an even game with komi is played",
    )
    handicap_reduced_komi_threshold: float = Field(
        default=0.5,
        description="Fraction of a rank above which a stone game also gets half a point of komi",
    )

    # ==========================================================================
    # API Configuration
    # ==========================================================================

    api_host: str = Field(
        default="127.0.0.1",
        description="Host to bind the API server to",
    )
    api_port: int = Field(
        default=8080,
        description="Port for the API server",
    )

    # ==========================================================================
    # Logging Configuration
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v

    @field_validator("forfeit_policy")
    @classmethod
    def validate_forfeit_policy(cls, v: str) -> str:
        lower_v = v.lower()
        if lower_v not in {"score", "ignore"}:
            raise ValueError("forfeit_policy must be 'score' or 'ignore'")
        return lower_v

    @field_validator("rating_step", "rating_spread")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only load settings once,
    which is important because loading from .env can be slow.
    """
    return Settings()


# Convenience alias for importing
settings = get_settings()

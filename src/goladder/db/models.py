"""
SQLAlchemy ORM models for the Go ladder.

Four tables: players, rounds, presence and games.
Each player's current_rating is derived data. It is written only by the
rating updater (goladder.rating.updater), which recomputes it from
initial_rating and the decided games. Nothing else should assign it.

Key design decisions:
- Handicaps are stored as canonical handicap text ('0w6½', '3b5'), the
  same grammar admins type in, so the column is readable without code.
- Results are stored as GameResult tags; NULL means the game is pending.
- Free-form per-row data lives in an `extra` JSON column (JSONB on
  PostgreSQL) so round descriptions and flags need no migrations.

Tables:
- players: Ladder members and their ratings
- rounds: Dated ladder evenings
- presence: Whether a player intends to play in a round
- games: Pairings and results
"""

from datetime import date as calendar_date, datetime
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    JSON,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from goladder.rating.handicap import EVEN, HandicapSpec, format_handicap, parse_handicap
from goladder.results import GameResult, result_from_db

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

DEFAULT_BOARD_SIZE = 19


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# =============================================================================
# Player Models
# =============================================================================

class Player(Base):
    """
    A ladder member.

    initial_rating is the baseline the player entered the season with
    (set at creation or season import) and never changes afterwards.
    current_rating is derived; see the module docstring.
    """
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Whether the player is assumed present when no presence row exists
    default_schedule: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    initial_rating: Mapped[float] = mapped_column(Float, nullable=False)
    current_rating: Mapped[float] = mapped_column(Float, nullable=False)

    extra: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    presences: Mapped[list["Presence"]] = relationship(back_populates="player")

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name='{self.name}', rating={self.current_rating:.0f})>"


# =============================================================================
# Round Models
# =============================================================================

class Round(Base):
    """
    One ladder evening.

    Rounds are ordered by date, ties broken by id. `extra` may hold a
    'description' and a 'hidden' flag for rounds that should not be shown
    in round lists (e.g. cancelled evenings kept for history).
    """
    __tablename__ = "rounds"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[calendar_date] = mapped_column(Date, nullable=False)
    extra: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    games: Mapped[list["Game"]] = relationship(
        back_populates="round", order_by="Game.id"
    )
    presences: Mapped[list["Presence"]] = relationship(back_populates="round")

    __table_args__ = (
        Index("idx_rounds_date", "date", "id"),
    )

    @property
    def description(self) -> Optional[str]:
        return (self.extra or {}).get("description")

    @property
    def hidden(self) -> bool:
        return bool((self.extra or {}).get("hidden", False))

    def __repr__(self) -> str:
        return f"<Round(id={self.id}, date={self.date})>"


class Presence(Base):
    """Whether a player intends to play in a round. Unique per (player, round)."""
    __tablename__ = "presence"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    round_id: Mapped[int] = mapped_column(ForeignKey("rounds.id"), nullable=False)
    scheduled: Mapped[bool] = mapped_column(Boolean, nullable=False)

    player: Mapped["Player"] = relationship(back_populates="presences")
    round: Mapped["Round"] = relationship(back_populates="presences")

    __table_args__ = (
        UniqueConstraint("player_id", "round_id", name="uq_presence_player_round"),
    )

    def __repr__(self) -> str:
        return (
            f"<Presence(player_id={self.player_id}, round_id={self.round_id}, "
            f"scheduled={self.scheduled})>"
        )


# =============================================================================
# Game Models
# =============================================================================

class Game(Base):
    """
    A game between two players in a round.

    Lifecycle:
    - Created pending (result NULL) by auto-pairing or as a custom game
    - Decided by setting a result
    - Cleared back to pending, or deleted; both trigger a rating recompute
      when the game had been decided
    """
    __tablename__ = "games"

    id: Mapped[int] = mapped_column(primary_key=True)
    round_id: Mapped[int] = mapped_column(ForeignKey("rounds.id"), nullable=False)
    white_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    black_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)

    # GameResult tag; NULL while pending
    result: Mapped[Optional[str]] = mapped_column(String(24), nullable=True)

    # Canonical handicap text, see goladder.rating.handicap
    handicap: Mapped[str] = mapped_column(
        String(8), nullable=False, default=format_handicap(EVEN)
    )
    board_size: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=DEFAULT_BOARD_SIZE
    )
    extra: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    round: Mapped["Round"] = relationship(back_populates="games")
    white: Mapped["Player"] = relationship(foreign_keys=[white_id])
    black: Mapped["Player"] = relationship(foreign_keys=[black_id])

    __table_args__ = (
        CheckConstraint("white_id <> black_id", name="ck_games_distinct_players"),
        Index("idx_games_round", "round_id"),
        Index("idx_games_white", "white_id"),
        Index("idx_games_black", "black_id"),
    )

    @property
    def game_result(self) -> Optional[GameResult]:
        return result_from_db(self.result)

    @property
    def handicap_spec(self) -> HandicapSpec:
        return parse_handicap(self.handicap)

    @property
    def is_decided(self) -> bool:
        return self.result is not None

    def __repr__(self) -> str:
        return (
            f"<Game(id={self.id}, round_id={self.round_id}, white={self.white_id}, "
            f"black={self.black_id}, result={self.result}, handicap='{self.handicap}')>"
        )

"""
Rating update service: keeps players.current_rating equal to the ledger.

There is no incremental path. Every call folds the whole decided game log
from each player's initial rating (see goladder.rating.ledger), so inserting,
correcting, clearing or deleting any result leaves no residue.

Flow:
1. Take the ledger lock (goladder.db.locks)
2. Load initial ratings for all players (one query)
3. Load decided games joined with their round date (one query)
4. Fold in memory, no DB calls per game
5. One bulk UPDATE of current_rating for the players whose value changed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from goladder.db.locks import lock_ledger
from goladder.db.models import Game, Player, Round
from goladder.rating.constants import RatingConfig, get_rating_config
from goladder.rating.handicap import parse_handicap
from goladder.rating.ledger import LedgerGame, LedgerResult, fold_games
from goladder.results import result_from_db

logger = logging.getLogger(__name__)

# Ratings closer than this are treated as unchanged
RATING_TOLERANCE = 1e-9


@dataclass
class UpdateResult:
    """Summary returned by RatingUpdater.recompute()."""
    processed: int = 0
    changed_player_ids: list[int] = field(default_factory=list)
    # Stored current_rating of every player before the recompute
    previous_ratings: dict[int, float] = field(default_factory=dict)
    ledger: Optional[LedgerResult] = None

    def summary(self) -> str:
        return (
            f"Rating recompute complete: {self.processed} rated games, "
            f"{len(self.changed_player_ids)} players changed"
        )


class RatingUpdater:
    """
    Recomputes every player's current rating from the game log.

    Usage:
        with get_session() as session:
            result = RatingUpdater.from_settings().recompute(session)
            print(result.summary())

    The caller owns the transaction. apply_schedule() calls recompute()
    inside the same transaction as the round edits that triggered it.
    """

    def __init__(self, config: RatingConfig) -> None:
        self.config = config

    @classmethod
    def from_settings(cls) -> "RatingUpdater":
        """Instantiate with the RatingConfig built from application settings."""
        return cls(get_rating_config())

    def load_game_log(self, session: Session) -> list[LedgerGame]:
        """Every decided game as a LedgerGame, in fold order."""
        rows = session.execute(
            select(
                Game.id,
                Game.round_id,
                Round.date,
                Game.white_id,
                Game.black_id,
                Game.result,
                Game.handicap,
            )
            .join(Round, Game.round_id == Round.id)
            .where(Game.result.is_not(None))
            .order_by(Round.date, Round.id, Game.id)
        ).all()
        return [
            LedgerGame(
                game_id=row.id,
                round_id=row.round_id,
                round_date=row.date,
                white_id=row.white_id,
                black_id=row.black_id,
                result=result_from_db(row.result),
                handicap=parse_handicap(row.handicap),
            )
            for row in rows
        ]

    def compute(self, session: Session) -> tuple[dict[int, float], LedgerResult]:
        """Fold the log without writing. Returns (stored ratings, ledger result)."""
        players = session.execute(
            select(Player.id, Player.initial_rating, Player.current_rating)
        ).all()
        initial = {p.id: p.initial_rating for p in players}
        stored = {p.id: p.current_rating for p in players}
        ledger = fold_games(initial, self.load_game_log(session), self.config)
        return stored, ledger

    def recompute(self, session: Session) -> UpdateResult:
        """
        Recompute and persist current ratings.

        Takes the ledger lock first, so the fold reads a log no other
        writer is folding at the same time. The lock is held until the
        caller's transaction ends.

        Args:
            session: Active SQLAlchemy session. Caller is responsible for commit.

        Returns:
            UpdateResult with the number of rated games, the ids of the
            players whose stored rating changed and the ratings stored
            before this call.
        """
        lock_ledger(session)
        session.flush()
        stored, ledger = self.compute(session)

        changed = [
            pid for pid, rating in ledger.ratings.items()
            if abs(rating - stored[pid]) > RATING_TOLERANCE
        ]
        if changed:
            session.execute(
                update(Player),
                [
                    {"id": pid, "current_rating": ledger.ratings[pid]}
                    for pid in changed
                ],
            )
            # Keep already-loaded Player objects in step with the UPDATE
            session.expire_all()

        for change in ledger.changes:
            logger.debug("%r", change)
        logger.info(
            "Recomputed ratings from %d games; %d players changed",
            len(ledger.changes), len(changed),
        )
        return UpdateResult(
            processed=len(ledger.changes),
            changed_player_ids=sorted(changed),
            previous_ratings=stored,
            ledger=ledger,
        )

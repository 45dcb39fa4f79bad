"""
Rating ledger: current ratings as a pure fold over the game log.

A player's current rating is never stored as a running counter that gets
patched when a result changes. It is always

    initial rating + fold of deltas over every rated game,
    in (round date, round id, game id) order

and each delta depends only on the stored attributes of its game (players,
handicap, result) and the ratings produced by the games before it. Inserting,
correcting, clearing or deleting any result is therefore handled the same
way: recompute from scratch. Editing a result is delete-then-insert.

Optional round batching, all off by default:

- apply_per_round: every game of a round is rated from the ratings as they
  stood when the round began; the summed deltas are applied when the round
  ends.
- max_drop_per_round: with apply_per_round, the largest loss applied for
  one round.
- min_rating: no rating falls below this floor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Optional

from goladder.rating.calculator import RatingCalculator, RatingChange
from goladder.rating.constants import DEFAULT_CONFIG, ForfeitPolicy, RatingConfig
from goladder.rating.handicap import EVEN, HandicapSpec
from goladder.results import GameResult


@dataclass(frozen=True)
class LedgerGame:
    """One game of the log, as the ledger sees it."""
    game_id: int
    round_id: int
    round_date: date
    white_id: int
    black_id: int
    result: Optional[GameResult] = None
    handicap: HandicapSpec = EVEN

    @property
    def is_decided(self) -> bool:
        return self.result is not None

    @property
    def sort_key(self) -> tuple[date, int, int]:
        return (self.round_date, self.round_id, self.game_id)


@dataclass
class LedgerResult:
    """Ratings after the fold, plus the per-game audit trail."""
    ratings: dict[int, float] = field(default_factory=dict)
    changes: list[RatingChange] = field(default_factory=list)

    def changes_for(self, player_id: int) -> list[RatingChange]:
        return [
            c for c in self.changes
            if player_id in (c.white_id, c.black_id)
        ]


def is_rated(game: LedgerGame, config: RatingConfig = DEFAULT_CONFIG) -> bool:
    """Whether a game contributes to ratings under the configured policy."""
    if game.result is None:
        return False
    if game.result.is_forfeit and config.forfeit_policy is ForfeitPolicy.IGNORE:
        return False
    return True


def ordered_rated_games(
    games: Iterable[LedgerGame],
    config: RatingConfig = DEFAULT_CONFIG,
) -> list[LedgerGame]:
    """Rated games in fold order."""
    return sorted(
        (g for g in games if is_rated(g, config)),
        key=lambda g: g.sort_key,
    )


def fold_games(
    initial_ratings: Mapping[int, float],
    games: Iterable[LedgerGame],
    config: RatingConfig = DEFAULT_CONFIG,
) -> LedgerResult:
    """
    Fold the game log over the initial ratings.

    Args:
        initial_ratings: player_id -> initial rating, for every player that
            can appear in the log.
        games: The game log in any order; pending games are ignored.
        config: Rating constants and ledger options.

    Returns:
        LedgerResult with the final rating of every player in
        initial_ratings and one RatingChange per rated game.

    Raises:
        LookupError: If a rated game names a player missing from
            initial_ratings.
    """
    calculator = RatingCalculator(config)
    ratings = {pid: float(r) for pid, r in initial_ratings.items()}
    result = LedgerResult(ratings=ratings)

    pending: dict[int, float] = {}
    current_round: Optional[int] = None

    for game in ordered_rated_games(games, config):
        for pid in (game.white_id, game.black_id):
            if pid not in ratings:
                raise LookupError(
                    f"Game {game.game_id} references unknown player {pid}"
                )

        if config.apply_per_round and game.round_id != current_round:
            _apply_pending(ratings, pending, config)
            current_round = game.round_id

        change = calculator.calculate(
            ratings[game.white_id],
            ratings[game.black_id],
            game.result,
            game.handicap,
        )
        change.game_id = game.game_id
        change.white_id = game.white_id
        change.black_id = game.black_id
        result.changes.append(change)

        if config.apply_per_round:
            pending[game.white_id] = pending.get(game.white_id, 0.0) + change.white_delta
            pending[game.black_id] = pending.get(game.black_id, 0.0) + change.black_delta
        else:
            ratings[game.white_id] = _floor(ratings[game.white_id] + change.white_delta, config)
            ratings[game.black_id] = _floor(ratings[game.black_id] + change.black_delta, config)

    _apply_pending(ratings, pending, config)
    return result


def compute_ratings(
    initial_ratings: Mapping[int, float],
    games: Iterable[LedgerGame],
    config: RatingConfig = DEFAULT_CONFIG,
) -> dict[int, float]:
    """Current rating of every player after folding the game log."""
    return fold_games(initial_ratings, games, config).ratings


def current_rating(
    player_id: int,
    initial_ratings: Mapping[int, float],
    games: Iterable[LedgerGame],
    config: RatingConfig = DEFAULT_CONFIG,
) -> float:
    """
    Current rating of one player.

    The whole log is folded, not only the player's own games: every
    opponent's pre-game rating depends on that opponent's history.
    A player without rated games keeps the initial rating.
    """
    return compute_ratings(initial_ratings, games, config)[player_id]


def _apply_pending(
    ratings: dict[int, float],
    pending: dict[int, float],
    config: RatingConfig,
) -> None:
    for pid, adjustment in pending.items():
        if config.max_drop_per_round is not None:
            adjustment = max(adjustment, -config.max_drop_per_round)
        ratings[pid] = _floor(ratings[pid] + adjustment, config)
    pending.clear()


def _floor(rating: float, config: RatingConfig) -> float:
    if config.min_rating is None:
        return rating
    return max(rating, config.min_rating)

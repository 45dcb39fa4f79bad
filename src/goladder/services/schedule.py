"""
Round scheduling service: applies one admin submission to a round.

A submission (ScheduleRequest) carries three kinds of edits:

- pair_player_ids: players to auto-pair (see goladder.pairing)
- game_actions: per existing game, one of none / delete / clear / a result
- custom: at most one admin-entered game

The batch is all-or-nothing. Everything is validated before the first
row changes, and the edits plus the rating recompute they trigger run in
the caller's transaction. The round lock (and the ledger lock, when a
recompute runs) is held until that transaction commits or rolls back. A
single bad item rejects the whole submission and leaves the round untouched.

Usage:
    from goladder.db import get_session
    from goladder.services.schedule import ScheduleRequest, apply_schedule

    with get_session() as session:
        outcome = apply_schedule(
            session,
            round_id=12,
            request=ScheduleRequest(pair_player_ids=[3, 5, 8, 9]),
        )
        print(outcome.summary())
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from goladder.db.locks import lock_round
from goladder.db.models import DEFAULT_BOARD_SIZE, Game, Player, Presence, Round
from goladder.errors import AlreadyPairedError
from goladder.pairing.engine import (
    PairingCandidate,
    ProposedGame,
    pair,
    validate_custom_game,
)
from goladder.rating.constants import RatingConfig, get_rating_config
from goladder.rating.handicap import format_handicap
from goladder.rating.updater import RatingUpdater
from goladder.results import GameResult

logger = logging.getLogger(__name__)


class ActionKind(str, Enum):
    NONE = "none"
    DELETE = "delete"
    CLEAR = "clear"
    SET = "set"


@dataclass(frozen=True)
class GameAction:
    """What to do with one existing game of the round."""
    kind: ActionKind
    result: Optional[GameResult] = None

    def __post_init__(self) -> None:
        if (self.kind is ActionKind.SET) != (self.result is not None):
            raise ValueError("a result is given exactly when the action is SET")

    @classmethod
    def none(cls) -> "GameAction":
        return cls(ActionKind.NONE)

    @classmethod
    def delete(cls) -> "GameAction":
        return cls(ActionKind.DELETE)

    @classmethod
    def clear(cls) -> "GameAction":
        return cls(ActionKind.CLEAR)

    @classmethod
    def set(cls, result: GameResult) -> "GameAction":
        return cls(ActionKind.SET, result)


def parse_game_action(tag: Optional[str]) -> GameAction:
    """
    Read an action tag from the scheduling form.

    'none' (or blank), 'delete' and 'clear' are actions; anything else
    must be a result tag or symbol accepted by GameResult.parse.

    Raises:
        UnknownResultError: If the tag is neither an action nor a result.
    """
    if tag is None:
        return GameAction.none()
    key = tag.strip().lower()
    if key in ("", "none"):
        return GameAction.none()
    if key == "delete":
        return GameAction.delete()
    if key == "clear":
        return GameAction.clear()
    return GameAction.set(GameResult.parse(tag))


@dataclass(frozen=True)
class CustomGame:
    """An admin-entered game, as submitted (handicap and result unparsed)."""
    white_id: int
    black_id: int
    handicap: Optional[str] = None
    result: Optional[str] = None
    board_size: int = DEFAULT_BOARD_SIZE


@dataclass
class ScheduleRequest:
    """One submission of the scheduling form."""
    pair_player_ids: list[int] = field(default_factory=list)
    game_actions: dict[int, GameAction] = field(default_factory=dict)
    custom: Optional[CustomGame] = None


@dataclass
class ScheduleOutcome:
    """What apply_schedule() changed."""
    round_id: int
    created_game_ids: list[int] = field(default_factory=list)
    deleted_game_ids: list[int] = field(default_factory=list)
    cleared_game_ids: list[int] = field(default_factory=list)
    result_game_ids: list[int] = field(default_factory=list)
    ratings_recomputed: bool = False
    changed_player_ids: list[int] = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable summary of the submission."""
        lines = [
            f"Round {self.round_id} schedule applied:",
            f"  Games created:        {len(self.created_game_ids)}",
            f"  Games deleted:        {len(self.deleted_game_ids)}",
            f"  Results cleared:      {len(self.cleared_game_ids)}",
            f"  Results set:          {len(self.result_game_ids)}",
        ]
        if self.ratings_recomputed:
            lines.append(f"  Ratings changed:      {len(self.changed_player_ids)} players")
        return "\n".join(lines)


def get_round(session: Session, round_id: int) -> Round:
    """Load a round or raise LookupError."""
    round_ = session.get(Round, round_id)
    if round_ is None:
        raise LookupError(f"Round {round_id} not found")
    return round_


def _load_players(session: Session, player_ids: list[int]) -> dict[int, Player]:
    players = {
        p.id: p
        for p in session.scalars(select(Player).where(Player.id.in_(player_ids)))
    }
    for pid in player_ids:
        if pid not in players:
            raise LookupError(f"Player {pid} not found")
    return players


def white_game_counts(session: Session, player_ids: list[int]) -> dict[int, int]:
    """Number of games each player has played (or is scheduled to play) as white."""
    if not player_ids:
        return {}
    rows = session.execute(
        select(Game.white_id, func.count(Game.id))
        .where(Game.white_id.in_(player_ids))
        .group_by(Game.white_id)
    ).all()
    counts = {pid: 0 for pid in player_ids}
    counts.update({white_id: count for white_id, count in rows})
    return counts


def schedulable_players(session: Session, round_id: int) -> list[Player]:
    """
    Players who intend to play in a round and have no game in it yet.

    Intention is the player's presence row for the round, or their
    default_schedule flag when there is none. Ordered strongest first.
    """
    get_round(session, round_id)
    presence = {
        p.player_id: p.scheduled
        for p in session.scalars(select(Presence).where(Presence.round_id == round_id))
    }
    paired: set[int] = set()
    for white_id, black_id in session.execute(
        select(Game.white_id, Game.black_id).where(Game.round_id == round_id)
    ):
        paired.update((white_id, black_id))

    players = session.scalars(
        select(Player).order_by(Player.current_rating.desc(), Player.name)
    ).all()
    return [
        p for p in players
        if p.id not in paired and presence.get(p.id, p.default_schedule)
    ]


def set_presence(
    session: Session,
    round_id: int,
    player_id: int,
    scheduled: bool,
) -> Presence:
    """Create or update a player's presence row for a round."""
    get_round(session, round_id)
    if session.get(Player, player_id) is None:
        raise LookupError(f"Player {player_id} not found")

    presence = session.scalars(
        select(Presence).where(
            Presence.round_id == round_id,
            Presence.player_id == player_id,
        )
    ).first()
    if presence is None:
        presence = Presence(round_id=round_id, player_id=player_id, scheduled=scheduled)
        session.add(presence)
    else:
        presence.scheduled = scheduled
    session.flush()
    return presence


def _new_game(round_id: int, proposed: ProposedGame) -> Game:
    return Game(
        round_id=round_id,
        white_id=proposed.white_id,
        black_id=proposed.black_id,
        handicap=format_handicap(proposed.handicap),
        result=proposed.result.value if proposed.result is not None else None,
        board_size=proposed.board_size,
    )


def apply_schedule(
    session: Session,
    round_id: int,
    request: ScheduleRequest,
    config: Optional[RatingConfig] = None,
) -> ScheduleOutcome:
    """
    Validate and apply one scheduling submission.

    Args:
        session: Active session. The caller commits (get_session() does).
        round_id: Round being edited.
        request: The submission.
        config: Rating configuration; defaults to the one from settings.

    Returns:
        ScheduleOutcome describing the changes.

    Raises:
        LookupError: Unknown round, game or player, or a game that belongs
            to another round.
        LadderInputError: Any pairing, handicap or result error. Nothing
            has been changed when this is raised.
    """
    config = config or get_rating_config()
    outcome = ScheduleOutcome(round_id=round_id)

    lock_round(session, round_id)
    get_round(session, round_id)
    games = {
        g.id: g
        for g in session.scalars(select(Game).where(Game.round_id == round_id))
    }

    # ------------------------------------------------------------------
    # Validate everything before the first change
    # ------------------------------------------------------------------
    for game_id in request.game_actions:
        if game_id not in games:
            raise LookupError(f"Game {game_id} not found in round {round_id}")

    deleted_ids = {
        gid for gid, action in request.game_actions.items()
        if action.kind is ActionKind.DELETE
    }
    remaining: list = [g for gid, g in games.items() if gid not in deleted_ids]

    custom: Optional[ProposedGame] = None
    if request.custom is not None:
        c = request.custom
        custom = validate_custom_game(
            c.white_id, c.black_id, c.handicap, c.result, c.board_size
        )
        _load_players(session, [custom.white_id, custom.black_id])
        busy = {pid for g in remaining for pid in (g.white_id, g.black_id)}
        for pid in custom.player_ids:
            if pid in busy or pid in request.pair_player_ids:
                raise AlreadyPairedError(pid)
        remaining.append(custom)

    proposed: list[ProposedGame] = []
    if request.pair_player_ids:
        players = _load_players(session, request.pair_player_ids)
        whites = white_game_counts(session, list(players))
        candidates = [
            PairingCandidate(
                player_id=pid,
                name=players[pid].name,
                rating=players[pid].current_rating,
                white_games=whites[pid],
            )
            for pid in request.pair_player_ids
        ]
        proposed = pair(candidates, remaining, config)

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------
    needs_recompute = False
    for game_id, action in request.game_actions.items():
        game = games[game_id]
        if action.kind is ActionKind.DELETE:
            needs_recompute = needs_recompute or game.is_decided
            session.delete(game)
            outcome.deleted_game_ids.append(game_id)
        elif action.kind is ActionKind.CLEAR:
            if game.is_decided:
                needs_recompute = True
                game.result = None
            outcome.cleared_game_ids.append(game_id)
        elif action.kind is ActionKind.SET:
            if game.result != action.result.value:
                needs_recompute = True
                game.result = action.result.value
            outcome.result_game_ids.append(game_id)

    new_games = [_new_game(round_id, p) for p in proposed]
    if custom is not None:
        new_games.append(_new_game(round_id, custom))
        needs_recompute = needs_recompute or custom.result is not None
    session.add_all(new_games)
    session.flush()
    outcome.created_game_ids = [g.id for g in new_games]

    if needs_recompute:
        update = RatingUpdater(config).recompute(session)
        outcome.ratings_recomputed = True
        outcome.changed_player_ids = update.changed_player_ids

    logger.info(
        "Round %d: %d created, %d deleted, %d cleared, %d results set%s",
        round_id,
        len(outcome.created_game_ids),
        len(outcome.deleted_game_ids),
        len(outcome.cleared_game_ids),
        len(outcome.result_game_ids),
        ", ratings recomputed" if outcome.ratings_recomputed else "",
    )
    return outcome

"""
Ladder standings.

One row per player, strongest first, with the season's game record and a
round-by-round crosstable. Wins by default count as wins; a double loss
counts as a game without a win. Score is wins plus half a point per jigo.

The crosstable columns are the rounds that have at least one decided game,
in date order. Each row holds one list per column with that player's games
of the round, seen from the player's side.

The season totals put every decided game in exactly one bucket: white
wins, black wins, jigo, or forfeits (both kinds of win by default and
double losses).
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from goladder.db.models import Game, Player, Round
from goladder.rating.constants import RatingConfig, get_rating_config
from goladder.rating.rank import rank_of
from goladder.results import GameResult, SideResult, result_from_db


@dataclass(frozen=True)
class StandingRound:
    round_id: int
    date: date


@dataclass(frozen=True)
class OneSidedGame:
    """One crosstable entry: a game from one player's point of view."""
    game_id: int
    colour: str
    opponent_place: int
    handicap: str
    result: SideResult


@dataclass
class StandingRow:
    place: int
    player_id: int
    name: str
    rating: float
    rank: str
    initial_rating: float
    # Place by initial rating, to show who climbed
    original_place: int = 0
    games: int = 0
    wins: int = 0
    jigo: int = 0
    # One list per Standings.rounds entry
    results: list[list[OneSidedGame]] = field(default_factory=list)

    @property
    def losses(self) -> int:
        return self.games - self.wins - self.jigo

    @property
    def score(self) -> float:
        return self.wins + 0.5 * self.jigo


@dataclass
class StandingTotals:
    games: int = 0
    white_wins: int = 0
    black_wins: int = 0
    jigo: int = 0
    forfeits: int = 0


@dataclass
class Standings:
    rows: list[StandingRow] = field(default_factory=list)
    rounds: list[StandingRound] = field(default_factory=list)
    totals: StandingTotals = field(default_factory=StandingTotals)


def _count_total(totals: StandingTotals, result: GameResult) -> None:
    totals.games += 1
    if result.is_forfeit:
        totals.forfeits += 1
    elif result is GameResult.WHITE_WINS:
        totals.white_wins += 1
    elif result is GameResult.BLACK_WINS:
        totals.black_wins += 1
    else:
        totals.jigo += 1


def compute_standings(
    session: Session,
    config: Optional[RatingConfig] = None,
) -> Standings:
    """Standings and crosstable over every decided game."""
    config = config or get_rating_config()
    players = session.scalars(
        select(Player).order_by(Player.current_rating.desc(), Player.id)
    ).all()

    rows = {
        p.id: StandingRow(
            place=place,
            player_id=p.id,
            name=p.name,
            rating=p.current_rating,
            rank=rank_of(p.current_rating, config),
            initial_rating=p.initial_rating,
        )
        for place, p in enumerate(players, start=1)
    }
    by_initial = sorted(players, key=lambda p: (-p.initial_rating, p.id))
    for place, p in enumerate(by_initial, start=1):
        rows[p.id].original_place = place

    standings = Standings(rows=list(rows.values()))
    decided = session.execute(
        select(
            Round.id.label("round_id"),
            Round.date,
            Game.id,
            Game.white_id,
            Game.black_id,
            Game.handicap,
            Game.result,
        )
        .join(Round, Game.round_id == Round.id)
        .where(Game.result.is_not(None))
        .order_by(Round.date, Round.id, Game.id)
    ).all()

    for game in decided:
        if not standings.rounds or standings.rounds[-1].round_id != game.round_id:
            standings.rounds.append(StandingRound(game.round_id, game.date))
            for row in standings.rows:
                row.results.append([])

        result = result_from_db(game.result)
        white, black = rows[game.white_id], rows[game.black_id]
        for row, colour, opponent in ((white, "white", black), (black, "black", white)):
            row.games += 1
            seen = result.seen_from(colour)
            if seen in (SideResult.WIN, SideResult.WIN_BY_DEFAULT):
                row.wins += 1
            elif seen is SideResult.JIGO:
                row.jigo += 1
            row.results[-1].append(
                OneSidedGame(
                    game_id=game.id,
                    colour=colour,
                    opponent_place=opponent.place,
                    handicap=game.handicap,
                    result=seen,
                )
            )
        _count_total(standings.totals, result)

    return standings

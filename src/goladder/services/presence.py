"""
Presence overview: upcoming rounds against players.

Each cell says whether a player intends to play a round. Explicit
presence rows win; without one, the player's default_schedule applies.
Players come strongest first, rounds in date order from the given day on.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from goladder.db.models import Player, Presence, Round


@dataclass(frozen=True)
class PresenceCell:
    scheduled: bool
    # False when the value comes from the player's default_schedule
    explicit: bool


@dataclass
class PresenceRow:
    player_id: int
    name: str
    default_schedule: bool
    # One cell per PresenceOverview.rounds entry
    cells: list[PresenceCell] = field(default_factory=list)


@dataclass
class PresenceOverview:
    since: date
    rounds: list[Round] = field(default_factory=list)
    rows: list[PresenceRow] = field(default_factory=list)


def presence_overview(
    session: Session,
    since: Optional[date] = None,
    include_hidden: bool = False,
) -> PresenceOverview:
    """
    Build the presence matrix for rounds on or after `since` (default today).

    Args:
        session: Active session.
        since: First day to include.
        include_hidden: Also show hidden rounds.
    """
    since = since or date.today()
    rounds = [
        r for r in session.scalars(
            select(Round).where(Round.date >= since).order_by(Round.date, Round.id)
        )
        if include_hidden or not r.hidden
    ]
    round_ids = [r.id for r in rounds]

    explicit: dict[tuple[int, int], bool] = {}
    if rounds:
        for presence in session.scalars(
            select(Presence).where(Presence.round_id.in_(round_ids))
        ):
            explicit[(presence.player_id, presence.round_id)] = presence.scheduled

    players = session.scalars(
        select(Player).order_by(Player.current_rating.desc(), Player.id)
    ).all()
    rows = []
    for player in players:
        cells = []
        for round_ in rounds:
            scheduled = explicit.get((player.id, round_.id))
            if scheduled is None:
                cells.append(PresenceCell(player.default_schedule, explicit=False))
            else:
                cells.append(PresenceCell(scheduled, explicit=True))
        rows.append(
            PresenceRow(
                player_id=player.id,
                name=player.name,
                default_schedule=player.default_schedule,
                cells=cells,
            )
        )
    return PresenceOverview(since=since, rounds=rounds, rows=rows)

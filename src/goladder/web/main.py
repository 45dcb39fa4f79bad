"""
FastAPI JSON API for the ladder.

HTML rendering and authentication are left to the front end; the reverse
proxy in front of this app restricts who may call the mutating routes.

Errors:
- LadderInputError (bad handicap, odd pairing count, ...) -> 400 with
  {"detail": message, "error": kind}
- LookupError (unknown round, game or player) -> 404
"""

import logging
from datetime import date as calendar_date
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from goladder import __version__
from goladder.db.models import DEFAULT_BOARD_SIZE, Game, Player, Round
from goladder.db.session import get_db
from goladder.errors import LadderInputError
from goladder.rating.constants import DEFAULT_INITIAL_RATING, get_rating_config
from goladder.rating.rank import format_rating, rank_of, rating_of
from goladder.results import result_symbol
from goladder.services.data_exchange import EXPORT_FILENAME, export_players, import_players
from goladder.services.schedule import (
    CustomGame,
    ScheduleRequest,
    apply_schedule,
    get_round,
    parse_game_action,
    schedulable_players,
    set_presence,
)
from goladder.services.presence import presence_overview
from goladder.services.standings import compute_standings

logger = logging.getLogger(__name__)

app = FastAPI(title="Go Ladder", version=__version__)


@app.exception_handler(LadderInputError)
async def ladder_input_error_handler(request: Request, exc: LadderInputError):
    return JSONResponse({"detail": str(exc), "error": exc.kind}, status_code=400)


@app.exception_handler(LookupError)
async def lookup_error_handler(request: Request, exc: LookupError):
    return JSONResponse({"detail": str(exc).strip("'\"")}, status_code=404)


# =============================================================================
# Request bodies
# =============================================================================

class PlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    # Either a rating or a rank label such as '5k'; neither means 20k
    rating: Optional[float] = Field(None, allow_inf_nan=False)
    rank: Optional[str] = None
    default_schedule: bool = False


class RoundCreate(BaseModel):
    date: calendar_date
    description: Optional[str] = None
    hidden: bool = False


class CustomGameBody(BaseModel):
    white_id: int
    black_id: int
    handicap: Optional[str] = None
    result: Optional[str] = None
    board_size: int = Field(DEFAULT_BOARD_SIZE, ge=1)


class ScheduleBody(BaseModel):
    pair: List[int] = Field(default_factory=list)
    # game id -> 'none' | 'delete' | 'clear' | result tag
    actions: Dict[int, str] = Field(default_factory=dict)
    custom: Optional[CustomGameBody] = None


class PresenceBody(BaseModel):
    scheduled: bool


# =============================================================================
# Serialisers
# =============================================================================

def _player_json(player: Player) -> Dict[str, Any]:
    config = get_rating_config()
    return {
        "id": player.id,
        "name": player.name,
        "rating": player.current_rating,
        "rating_display": format_rating(player.current_rating),
        "rank": rank_of(player.current_rating, config),
        "initial_rating": player.initial_rating,
        "default_schedule": player.default_schedule,
    }


def _round_json(round_: Round) -> Dict[str, Any]:
    return {
        "id": round_.id,
        "date": round_.date.isoformat(),
        "description": round_.description,
        "hidden": round_.hidden,
    }


def _game_json(game: Game) -> Dict[str, Any]:
    return {
        "id": game.id,
        "white_id": game.white_id,
        "white": game.white.name,
        "black_id": game.black_id,
        "black": game.black.name,
        "handicap": game.handicap,
        "board_size": game.board_size,
        "result": game.result,
        "result_symbol": result_symbol(game.game_result),
    }


# =============================================================================
# Players
# =============================================================================

@app.get("/players")
async def list_players(db: Session = Depends(get_db)):
    """All players, strongest first."""
    players = db.scalars(
        select(Player).order_by(Player.current_rating.desc(), Player.id)
    ).all()
    return {"players": [_player_json(p) for p in players]}


@app.post("/players", status_code=201)
async def create_player(body: PlayerCreate, db: Session = Depends(get_db)):
    """Add a player. The starting rating is also the initial rating."""
    name = body.name.strip()
    if db.scalars(select(Player).where(Player.name == name)).first() is not None:
        raise HTTPException(status_code=409, detail=f"Player {name!r} already exists")

    if body.rating is not None:
        rating = body.rating
    elif body.rank:
        rating = rating_of(body.rank, get_rating_config())
    else:
        rating = DEFAULT_INITIAL_RATING

    player = Player(
        name=name,
        initial_rating=rating,
        current_rating=rating,
        default_schedule=body.default_schedule,
    )
    db.add(player)
    db.commit()
    logger.info("Created player %s (%.0f)", name, rating)
    return _player_json(player)


# =============================================================================
# Rounds
# =============================================================================

@app.get("/rounds")
async def list_rounds(
    db: Session = Depends(get_db),
    include_hidden: bool = Query(False, description="Include hidden rounds"),
):
    """Rounds in date order."""
    rounds = db.scalars(select(Round).order_by(Round.date, Round.id)).all()
    return {
        "rounds": [
            _round_json(r) for r in rounds if include_hidden or not r.hidden
        ]
    }


@app.post("/rounds", status_code=201)
async def create_round(body: RoundCreate, db: Session = Depends(get_db)):
    extra: Dict[str, Any] = {}
    if body.description:
        extra["description"] = body.description
    if body.hidden:
        extra["hidden"] = True
    round_ = Round(date=body.date, extra=extra or None)
    db.add(round_)
    db.commit()
    return _round_json(round_)


@app.get("/rounds/{round_id}/schedule")
async def get_schedule(round_id: int, db: Session = Depends(get_db)):
    """The round's games and the players still waiting for a game."""
    round_ = get_round(db, round_id)
    return {
        "round": _round_json(round_),
        "games": [_game_json(g) for g in round_.games],
        "schedulable": [_player_json(p) for p in schedulable_players(db, round_id)],
    }


@app.post("/rounds/{round_id}/schedule")
async def post_schedule(
    round_id: int,
    body: ScheduleBody,
    db: Session = Depends(get_db),
):
    """
    Apply one scheduling submission.

    All-or-nothing: a single invalid item rejects the whole submission.
    """
    request = ScheduleRequest(
        pair_player_ids=list(body.pair),
        game_actions={gid: parse_game_action(tag) for gid, tag in body.actions.items()},
        custom=CustomGame(**body.custom.model_dump()) if body.custom else None,
    )
    outcome = apply_schedule(db, round_id, request, get_rating_config())
    db.commit()
    return {
        "round_id": outcome.round_id,
        "created_game_ids": outcome.created_game_ids,
        "deleted_game_ids": outcome.deleted_game_ids,
        "cleared_game_ids": outcome.cleared_game_ids,
        "result_game_ids": outcome.result_game_ids,
        "ratings_recomputed": outcome.ratings_recomputed,
        "changed_player_ids": outcome.changed_player_ids,
    }


@app.put("/rounds/{round_id}/presence/{player_id}")
async def put_presence(
    round_id: int,
    player_id: int,
    body: PresenceBody,
    db: Session = Depends(get_db),
):
    presence = set_presence(db, round_id, player_id, body.scheduled)
    db.commit()
    return {
        "round_id": presence.round_id,
        "player_id": presence.player_id,
        "scheduled": presence.scheduled,
    }


@app.get("/presence")
async def get_presence(
    db: Session = Depends(get_db),
    since: Optional[calendar_date] = Query(None, description="First day to show; defaults to today"),
    include_hidden: bool = Query(False, description="Include hidden rounds"),
):
    """Upcoming rounds by players: explicit presence, or the player's default."""
    overview = presence_overview(db, since, include_hidden)
    return {
        "since": overview.since.isoformat(),
        "rounds": [_round_json(r) for r in overview.rounds],
        "players": [
            {
                "player_id": row.player_id,
                "name": row.name,
                "default_schedule": row.default_schedule,
                "presence": [
                    {"scheduled": cell.scheduled, "explicit": cell.explicit}
                    for cell in row.cells
                ],
            }
            for row in overview.rows
        ],
    }


# =============================================================================
# Standings and season exchange
# =============================================================================

@app.get("/standings")
async def get_standings(db: Session = Depends(get_db)):
    standings = compute_standings(db, get_rating_config())
    return {
        "rows": [
            {
                "place": row.place,
                "player_id": row.player_id,
                "name": row.name,
                "rating": row.rating,
                "rank": row.rank,
                "original_place": row.original_place,
                "games": row.games,
                "wins": row.wins,
                "jigo": row.jigo,
                "losses": row.losses,
                "score": row.score,
                "results": [
                    [
                        {
                            "game_id": g.game_id,
                            "colour": g.colour,
                            "opponent_place": g.opponent_place,
                            "handicap": g.handicap,
                            "result": g.result.value,
                            "symbol": g.result.symbol,
                        }
                        for g in games
                    ]
                    for games in row.results
                ],
            }
            for row in standings.rows
        ],
        "rounds": [
            {"id": r.round_id, "date": r.date.isoformat()} for r in standings.rounds
        ],
        "totals": {
            "games": standings.totals.games,
            "white_wins": standings.totals.white_wins,
            "black_wins": standings.totals.black_wins,
            "jigo": standings.totals.jigo,
            "forfeits": standings.totals.forfeits,
        },
    }


@app.get("/export")
async def export(db: Session = Depends(get_db)):
    return Response(
        content=export_players(db),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@app.post("/import")
async def import_(request: Request, db: Session = Depends(get_db)):
    """Import players from an exported document (raw JSON body)."""
    result = import_players(db, await request.body())
    db.commit()
    return {"imported": result.imported, "skipped": result.skipped}

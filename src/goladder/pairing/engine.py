"""
Pairing engine: turns a round's selected players into balanced games.

Auto-pairing sorts the candidates by rating (ties by name, then id) and
pairs neighbours: 0 with 1, 2 with 3, and so on. For players on a line,
pairing sorted neighbours minimises the sum of rating gaps over all
perfect matchings, which is what keeps games close.

Colours:
- Handicap games: black is the weaker player, who receives the stones
  or komi.
- Even games: the player with more white games so far plays black; on a
  tie the lower player id plays black.

Every proposed game is pending. Persisting it is the scheduling service's
job (goladder.services.schedule).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from goladder.db.models import DEFAULT_BOARD_SIZE
from goladder.errors import AlreadyPairedError, OddCountError, SelfPairingError
from goladder.rating.constants import DEFAULT_CONFIG, RatingConfig
from goladder.rating.handicap import EVEN, HandicapSpec, handicap_for, parse_handicap
from goladder.results import GameResult

logger = logging.getLogger(__name__)


class PairedGame(Protocol):
    """Anything with two player ids, e.g. a Game row or a ProposedGame."""
    white_id: int
    black_id: int


@dataclass(frozen=True)
class PairingCandidate:
    """A player selected for auto-pairing."""
    player_id: int
    name: str
    rating: float
    # Games played as white this season, for colour balancing
    white_games: int = 0


@dataclass(frozen=True)
class ProposedGame:
    """A pending game produced by pair() or validate_custom_game()."""
    white_id: int
    black_id: int
    handicap: HandicapSpec = EVEN
    result: Optional[GameResult] = None
    board_size: int = DEFAULT_BOARD_SIZE

    @property
    def player_ids(self) -> tuple[int, int]:
        return (self.white_id, self.black_id)


def _sort_key(candidate: PairingCandidate) -> tuple[float, str, int]:
    return (candidate.rating, candidate.name, candidate.player_id)


def _assign_colours(
    first: PairingCandidate,
    second: PairingCandidate,
    handicap: HandicapSpec,
) -> tuple[PairingCandidate, PairingCandidate]:
    """Return (white, black) for one pair."""
    if not handicap.is_even:
        # first sorts lower, so it is the weaker player
        return second, first
    if first.white_games != second.white_games:
        if first.white_games > second.white_games:
            return second, first
        return first, second
    if first.player_id < second.player_id:
        return second, first
    return first, second


def check_candidates(
    candidates: Sequence[PairingCandidate],
    existing_games: Iterable[PairedGame] = (),
) -> None:
    """
    Validate auto-pairing preconditions without pairing.

    Raises:
        OddCountError: If the number of candidates is odd.
        AlreadyPairedError: If a candidate is listed twice or already has
            a game in the round.
    """
    if len(candidates) % 2:
        raise OddCountError(len(candidates))

    paired: set[int] = set()
    for game in existing_games:
        paired.add(game.white_id)
        paired.add(game.black_id)

    seen: set[int] = set()
    for candidate in candidates:
        if candidate.player_id in paired or candidate.player_id in seen:
            raise AlreadyPairedError(candidate.player_id)
        seen.add(candidate.player_id)


def pair(
    candidates: Sequence[PairingCandidate],
    existing_games: Iterable[PairedGame] = (),
    config: RatingConfig = DEFAULT_CONFIG,
) -> list[ProposedGame]:
    """
    Pair candidates into pending games.

    Args:
        candidates: Players to pair, in any order.
        existing_games: Games that already exist in the round.
        config: Rating configuration (handicap table).

    Returns:
        len(candidates) // 2 games, ordered from the weakest pair up.

    Raises:
        OddCountError: If the number of candidates is odd.
        AlreadyPairedError: If a candidate already has a game in the round.

    Example:
        >>> games = pair([
        ...     PairingCandidate(1, "A", 1000.0),
        ...     PairingCandidate(2, "B", 1200.0),
        ... ])
        >>> games[0].white_id, games[0].black_id, str(games[0].handicap)
        (2, 1, '2b0')
    """
    check_candidates(candidates, existing_games)

    ordered = sorted(candidates, key=_sort_key)
    games: list[ProposedGame] = []
    for i in range(0, len(ordered), 2):
        first, second = ordered[i], ordered[i + 1]
        handicap = handicap_for(first.rating, second.rating, config)
        white, black = _assign_colours(first, second, handicap)
        games.append(ProposedGame(white.player_id, black.player_id, handicap))
        logger.debug(
            "Paired %s (%.0f) white vs %s (%.0f) black, handicap %s",
            white.name, white.rating, black.name, black.rating, handicap,
        )

    logger.info("Paired %d players into %d games", len(ordered), len(games))
    return games


def validate_custom_game(
    white_id: int,
    black_id: int,
    handicap_text: Optional[str] = None,
    result_tag: Optional[str] = None,
    board_size: int = DEFAULT_BOARD_SIZE,
) -> ProposedGame:
    """
    Validate an admin-entered game.

    Custom games skip sorting and colour balancing: the admin picks both
    colours. A blank handicap means an even game; a blank result means the
    game is pending.

    Raises:
        SelfPairingError: If white and black are the same player.
        HandicapParseError: If the handicap text is not valid.
        UnknownResultError: If the result tag is not a known result.
    """
    if white_id == black_id:
        raise SelfPairingError(white_id)
    if handicap_text is None or not handicap_text.strip():
        handicap = EVEN
    else:
        handicap = parse_handicap(handicap_text)
    result = None
    if result_tag is not None and result_tag.strip():
        result = GameResult.parse(result_tag)
    if board_size < 1:
        raise ValueError(f"board_size must be positive, got {board_size}")
    return ProposedGame(white_id, black_id, handicap, result, board_size)


def pairing_cost(
    games: Iterable[PairedGame],
    ratings: Mapping[int, float],
) -> float:
    """Sum of the rating gaps inside each pair."""
    return sum(abs(ratings[g.white_id] - ratings[g.black_id]) for g in games)

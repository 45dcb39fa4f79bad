"""Game result variants and helpers.

This module is the single source of truth for the six outcomes a game can
have, how they are written in the database, how they are displayed, and how
each side scores them.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from goladder.errors import UnknownResultError

PENDING_SYMBOL = "?-?"


class GameResult(str, Enum):
    """Outcome of a decided game. The value is the persisted tag."""

    WHITE_WINS = "WhiteWins"
    BLACK_WINS = "BlackWins"
    JIGO = "Jigo"
    WHITE_WINS_BY_DEFAULT = "WhiteWinsByDefault"
    BLACK_WINS_BY_DEFAULT = "BlackWinsByDefault"
    BOTH_LOSE = "BothLose"

    @property
    def symbol(self) -> str:
        """Short display form, e.g. '1-0' or '½-½'."""
        return _SYMBOLS[self]

    @property
    def is_forfeit(self) -> bool:
        """Whether the game was decided without being played out."""
        return self in FORFEIT_RESULTS

    def score_for_white(self) -> float:
        return _SCORES[self][0]

    def score_for_black(self) -> float:
        return _SCORES[self][1]

    def winner_colour(self) -> Optional[str]:
        """'white', 'black', or None for jigo and double losses."""
        if self in (GameResult.WHITE_WINS, GameResult.WHITE_WINS_BY_DEFAULT):
            return "white"
        if self in (GameResult.BLACK_WINS, GameResult.BLACK_WINS_BY_DEFAULT):
            return "black"
        return None

    def seen_from(self, colour: str) -> "SideResult":
        """The result as one side of the board sees it."""
        winner = self.winner_colour()
        if winner is not None:
            if winner == colour:
                return SideResult.WIN_BY_DEFAULT if self.is_forfeit else SideResult.WIN
            return SideResult.LOSS_BY_DEFAULT if self.is_forfeit else SideResult.LOSS
        if self is GameResult.JIGO:
            return SideResult.JIGO
        return SideResult.LOSS_BY_DEFAULT

    @classmethod
    def parse(cls, tag: str) -> "GameResult":
        """
        Read a result from its persisted tag or its display symbol.

        Accepts 'WhiteWins', 'whitewins', 'WHITE_WINS', '1-0', '0-1!', '½-½'
        and so on. Anything else raises UnknownResultError.
        """
        if tag is None:
            raise UnknownResultError(str(tag))
        raw = tag.strip()
        key = raw.replace("_", "").replace(" ", "").lower()
        found = _LOOKUP.get(key)
        if found is None:
            raise UnknownResultError(tag)
        return found


class SideResult(str, Enum):
    """A game result from one player's side, for crosstables."""

    WIN = "win"
    LOSS = "loss"
    JIGO = "jigo"
    WIN_BY_DEFAULT = "win_by_default"
    LOSS_BY_DEFAULT = "loss_by_default"

    @property
    def symbol(self) -> str:
        return _SIDE_SYMBOLS[self]


# (white score, black score)
_SCORES: dict[GameResult, tuple[float, float]] = {
    GameResult.WHITE_WINS: (1.0, 0.0),
    GameResult.BLACK_WINS: (0.0, 1.0),
    GameResult.JIGO: (0.5, 0.5),
    GameResult.WHITE_WINS_BY_DEFAULT: (1.0, 0.0),
    GameResult.BLACK_WINS_BY_DEFAULT: (0.0, 1.0),
    GameResult.BOTH_LOSE: (0.0, 0.0),
}

_SYMBOLS: dict[GameResult, str] = {
    GameResult.WHITE_WINS: "1-0",
    GameResult.BLACK_WINS: "0-1",
    GameResult.JIGO: "½-½",
    GameResult.WHITE_WINS_BY_DEFAULT: "1-0!",
    GameResult.BLACK_WINS_BY_DEFAULT: "0-1!",
    GameResult.BOTH_LOSE: "0-0",
}

_SIDE_SYMBOLS: dict[SideResult, str] = {
    SideResult.WIN: "+",
    SideResult.LOSS: "-",
    SideResult.JIGO: "=",
    SideResult.WIN_BY_DEFAULT: "+!",
    SideResult.LOSS_BY_DEFAULT: "-!",
}

FORFEIT_RESULTS: frozenset[GameResult] = frozenset({
    GameResult.WHITE_WINS_BY_DEFAULT,
    GameResult.BLACK_WINS_BY_DEFAULT,
    GameResult.BOTH_LOSE,
})

_LOOKUP: dict[str, GameResult] = {}
for _result in GameResult:
    _LOOKUP[_result.value.lower()] = _result
    _LOOKUP[_result.name.replace("_", "").lower()] = _result
    _LOOKUP[_result.symbol.lower()] = _result
_LOOKUP["1/2-1/2"] = GameResult.JIGO


def result_symbol(result: Optional[GameResult]) -> str:
    """Display symbol for a possibly pending result."""
    if result is None:
        return PENDING_SYMBOL
    return result.symbol


def result_from_db(tag: Optional[str]) -> Optional[GameResult]:
    """Convert a stored tag (or NULL) back into a GameResult."""
    if tag is None:
        return None
    return GameResult(tag)

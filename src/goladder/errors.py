"""
Input-validation errors shared across the ladder.

Every error here describes a rejected submission, never a process failure.
The web layer turns them into HTTP 400 responses; scripts print them.
Each carries the offending value so the caller can tell the user what to fix.
"""


class LadderInputError(ValueError):
    """Base class for all rejected ladder input."""

    #: Short machine-readable kind, echoed by the web API.
    kind = "invalid_input"


class OddCountError(LadderInputError):
    """Raised when auto-pairing is asked to pair an odd number of players."""

    kind = "odd_count"

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Cannot pair an odd number of players ({count})")


class AlreadyPairedError(LadderInputError):
    """Raised when a candidate already has a game in the round."""

    kind = "already_paired"

    def __init__(self, player_id: int):
        self.player_id = player_id
        super().__init__(f"Player {player_id} already has a game in this round")


class SelfPairingError(LadderInputError):
    """Raised when a custom game names the same player for both colours."""

    kind = "self_pairing"

    def __init__(self, player_id: int):
        self.player_id = player_id
        super().__init__(f"Player {player_id} cannot play against themselves")


class HandicapParseError(LadderInputError):
    """Raised when handicap text does not match the handicap grammar."""

    kind = "bad_handicap"

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Invalid handicap: {text!r}")


class UnknownResultError(LadderInputError):
    """Raised when a result or action tag is not one of the known variants."""

    kind = "unknown_result"

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Unknown game result: {tag!r}")


class RankParseError(LadderInputError):
    """Raised when a rank label such as '3k' or '2d' cannot be read."""

    kind = "bad_rank"

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Invalid rank label: {label!r}")


class DataExchangeError(LadderInputError):
    """Raised when a season import document is malformed."""

    kind = "bad_import"

"""Auto-pairing and custom game validation."""

from goladder.pairing.engine import (
    PairingCandidate,
    ProposedGame,
    check_candidates,
    pair,
    pairing_cost,
    validate_custom_game,
)

__all__ = [
    "PairingCandidate",
    "ProposedGame",
    "check_candidates",
    "pair",
    "pairing_cost",
    "validate_custom_game",
]

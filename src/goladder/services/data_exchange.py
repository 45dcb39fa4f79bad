"""
Season export and import.

The exchange document is JSON:

    {
      "program_version": "1.0.0",
      "players": [
        {"name": "Alice", "rating": 1425.0, "default_schedule": true},
        ...
      ]
    }

Export lists every player strongest first with their current rating.
Import adds the players whose names are not in the database yet, using
the exported rating as both initial and current rating, so a new season
starts from where the last one ended. Existing names are skipped, never
overwritten. program_version is informational and ignored on import.
"""

import logging
from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from goladder import __version__
from goladder.db.models import Player
from goladder.errors import DataExchangeError

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "goladder_export.json"


class ExchangePlayer(BaseModel):
    name: str
    rating: float = Field(allow_inf_nan=False)
    default_schedule: bool = False


class ExchangeDocument(BaseModel):
    program_version: str = __version__
    players: list[ExchangePlayer]


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0

    def summary(self) -> str:
        return f"Import complete: {self.imported} imported, {self.skipped} skipped"


def export_document(session: Session) -> ExchangeDocument:
    players = session.scalars(
        select(Player).order_by(Player.current_rating.desc(), Player.id)
    ).all()
    return ExchangeDocument(
        players=[
            ExchangePlayer(
                name=p.name,
                rating=p.current_rating,
                default_schedule=p.default_schedule,
            )
            for p in players
        ]
    )


def export_players(session: Session) -> str:
    """Export all players as a pretty-printed JSON document."""
    return export_document(session).model_dump_json(indent=2)


def import_players(session: Session, data: Union[str, bytes]) -> ImportResult:
    """
    Import players from an exchange document.

    Args:
        session: Active session. The caller commits.
        data: JSON document as produced by export_players(), as text or as
            UTF-8 bytes (a raw request body).

    Raises:
        DataExchangeError: If the document is not UTF-8, not valid JSON, or
            does not have the expected shape (a non-finite rating included).
            Nothing is imported in that case.
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DataExchangeError(f"Import document is not UTF-8: {exc}") from exc
    try:
        document = ExchangeDocument.model_validate_json(data)
    except ValidationError as exc:
        raise DataExchangeError(f"Invalid import document: {exc}") from exc

    known = set(session.scalars(select(Player.name)))
    result = ImportResult()
    for entry in document.players:
        if entry.name in known:
            result.skipped += 1
            logger.debug("Skipping existing player %s", entry.name)
            continue
        session.add(
            Player(
                name=entry.name,
                initial_rating=entry.rating,
                current_rating=entry.rating,
                default_schedule=entry.default_schedule,
            )
        )
        known.add(entry.name)
        result.imported += 1
    session.flush()

    logger.info("Imported %d players, skipped %d", result.imported, result.skipped)
    return result

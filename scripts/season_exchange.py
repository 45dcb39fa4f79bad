#!/usr/bin/env python3
"""
Export players at the end of a season, or import them into a new one.

Export (strongest first, current ratings):
    python scripts/season_exchange.py export goladder_export.json

Import (new names only; existing players are skipped):
    python scripts/season_exchange.py import goladder_export.json
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add src to path so this script can be run directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from goladder.config import settings
from goladder.db import get_session
from goladder.errors import DataExchangeError
from goladder.services.data_exchange import export_players, import_players

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Season player export/import.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("command", choices=("export", "import"))
    parser.add_argument("path", help="JSON file to write (export) or read (import).")
    return parser


def main() -> int:
    args = _build_parser().parse_args()
    path = Path(args.path)

    if args.command == "export":
        with get_session() as session:
            text = export_players(session)
        path.write_text(text + "\n", encoding="utf-8")
        print(f"Exported players to {path}")
        return 0

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"ERROR: cannot read {path}: {exc}")
        return 1

    try:
        with get_session() as session:
            result = import_players(session, text)
    except DataExchangeError as exc:
        print(f"ERROR: {exc}")
        return 1

    print(result.summary())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

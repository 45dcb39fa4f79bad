#!/usr/bin/env python3
"""
Recompute every player's current rating from the game log.

Ratings are always a fold over all decided games, so this is safe to run
at any time; it only writes players whose rating changed. The recompute
takes the same ledger lock as round scheduling, so it waits for any
in-flight schedule submission to commit.

Normal usage:
    python scripts/recompute_ratings.py

Dry run (show what would change without writing anything):
    python scripts/recompute_ratings.py --dry-run

Per-game audit trail:
    python scripts/recompute_ratings.py --dry-run --show-games
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from time import perf_counter

# Add src to path so this script can be run directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from goladder.config import settings
from goladder.db import get_session
from goladder.rating.rank import format_rating, rank_of
from goladder.rating.updater import RatingUpdater

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recompute current ratings from the game log.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute ratings but do not write to the database.",
    )
    parser.add_argument(
        "--show-games",
        action="store_true",
        help="Print the rating change of every rated game.",
    )
    parser.add_argument(
        "--metrics-json",
        default=None,
        help="Write a JSON summary to this path on completion.",
    )
    return parser


def main() -> int:
    args = _build_parser().parse_args()
    started_at = _utc_now_iso()
    print(f"RATING RECOMPUTE  dry_run={args.dry_run}  started={started_at}")
    print("-" * 60)

    t_start = perf_counter()
    updater = RatingUpdater.from_settings()

    with get_session() as session:
        result = updater.recompute(session)

        if args.show_games:
            for change in result.ledger.changes:
                print(
                    f"  game {change.game_id:>5}  "
                    f"W {change.white_id:>4} {change.white_delta:+7.2f}  "
                    f"B {change.black_id:>4} {change.black_delta:+7.2f}  "
                    f"{change.result.symbol:<5} {change.handicap}"
                )

        for pid in result.changed_player_ids:
            new = result.ledger.ratings[pid]
            print(
                f"  player {pid:>4}: {format_rating(result.previous_ratings[pid])} -> "
                f"{format_rating(new)} ({rank_of(new, updater.config)})"
            )

        if args.dry_run:
            session.rollback()
            print("(dry run - changes rolled back)")

    elapsed = perf_counter() - t_start

    print("-" * 60)
    print(f"Rated games:      {result.processed}")
    print(f"Players changed:  {len(result.changed_player_ids)}")
    print(f"Elapsed:          {elapsed:.2f}s")

    if args.metrics_json:
        payload = {
            "status": "success",
            "dry_run": args.dry_run,
            "started_at": started_at,
            "elapsed_s": round(elapsed, 3),
            "processed": result.processed,
            "changed_player_ids": result.changed_player_ids,
        }
        metrics_path = Path(args.metrics_json)
        metrics_path.parent.mkdir(parents=True, exist_ok=True)
        metrics_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python3
"""
Run the ladder JSON API with uvicorn.

    python scripts/run_api.py
    python scripts/run_api.py --reload
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add src to path so this script can be run directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import uvicorn

from goladder.config import settings


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the Go ladder API.")
    parser.add_argument("--host", default=settings.api_host)
    parser.add_argument("--port", type=int, default=settings.api_port)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes.")
    args = parser.parse_args()

    uvicorn.run(
        "goladder.web.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

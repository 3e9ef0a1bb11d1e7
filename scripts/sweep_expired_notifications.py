"""Utility script to delete expired notifications once, e.g. from cron."""

from __future__ import annotations

import argparse
import logging

from app.domain.errors import StoreUnavailableError
from app.infrastructure.database import SessionLocal, initialize_database
from app.infrastructure.notifications import ExpirySweeper


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Remove notifications whose expiry date has passed.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every sweep at INFO level")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    initialize_database()
    try:
        deleted = ExpirySweeper(SessionLocal, interval_seconds=0).sweep_once()
    except StoreUnavailableError as exc:
        raise SystemExit(f"Could not sweep notifications: {exc}") from exc
    print(f"Expired notifications removed: {deleted}")


if __name__ == "__main__":
    main()

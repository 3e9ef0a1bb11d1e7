"""Utility script to mint a bearer token for local websocket and REST testing."""

from __future__ import annotations

import argparse
from datetime import timedelta

from app.domain.entities import RecipientType
from app.infrastructure.security import create_access_token


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for token generation."""

    parser = argparse.ArgumentParser(
        description="Issue a signed access token for a notification recipient.",
    )
    parser.add_argument("user_id", help="Identifier of the user the token belongs to")
    parser.add_argument(
        "--role",
        choices=[role.value for role in RecipientType],
        type=str.upper,
        default=RecipientType.CITIZEN.value,
        help="Recipient role carried by the token (default: CITIZEN)",
    )
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help="Token lifetime in minutes (default: ACCESS_TOKEN_EXPIRE_MINUTES)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    expires = timedelta(minutes=args.minutes) if args.minutes else None
    token = create_access_token({"sub": args.user_id, "role": args.role}, expires)
    print(token)


if __name__ == "__main__":
    main()

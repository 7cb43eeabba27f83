#!/usr/bin/env python3
"""
Mint bearer tokens for the chatflow /api/v1 endpoints.

Tokens are HS256-signed with JWT_SECRET_KEY (or --secret) and carry the caller
name as the ``sub`` claim, which is also the rate limit key.

Usage:
    python scripts/generate_jwt.py --subject my-client
    python scripts/generate_jwt.py --expires-in 24h
    export CHATFLOW_TOKEN=$(python scripts/generate_jwt.py)

Exit codes:
    0: Success
    1: No secret available
    2: Invalid --expires-in value
"""

import argparse
import os
import sys
from datetime import datetime, timedelta, timezone

import jwt

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


def parse_duration(value: str) -> int:
    """
    Convert "90", "15m", "24h", "30d" or "2w" into seconds.

    Raises:
        ValueError: If the value is not a whole number with an optional unit
    """
    value = value.strip().lower()
    if not value:
        raise ValueError("empty duration")
    if value.isdigit():
        return int(value)

    amount, unit = value[:-1], value[-1]
    if unit not in _UNIT_SECONDS or not amount.isdigit():
        raise ValueError(f"invalid duration '{value}', expected e.g. 3600s, 15m, 24h, 30d")
    return int(amount) * _UNIT_SECONDS[unit]


def mint_token(
    secret_key: str,
    subject: str = "client",
    expires_in: int | None = None,
    algorithm: str = "HS256",
) -> str:
    now = datetime.now(tz=timezone.utc)
    claims: dict = {"sub": subject, "iat": now}
    if expires_in is not None:
        claims["exp"] = now + timedelta(seconds=expires_in)
    return jwt.encode(claims, secret_key, algorithm=algorithm)


def main() -> int:
    parser = argparse.ArgumentParser(description="Mint a chatflow bearer token")
    parser.add_argument("--secret", default=None, help="Signing key (default: $JWT_SECRET_KEY)")
    parser.add_argument("--subject", default="client", help="sub claim (default: client)")
    parser.add_argument("--expires-in", default=None, help="Lifetime, e.g. 24h (default: none)")
    parser.add_argument("--algorithm", default="HS256", help="Signing algorithm")
    args = parser.parse_args()

    secret_key = args.secret or os.getenv("JWT_SECRET_KEY")
    if not secret_key:
        print("ERROR: set JWT_SECRET_KEY or pass --secret", file=sys.stderr)
        return 1
    if len(secret_key) < 32:
        print(
            f"WARNING: secret is {len(secret_key)} characters; the service requires 32",
            file=sys.stderr,
        )

    expires_in = None
    if args.expires_in:
        try:
            expires_in = parse_duration(args.expires_in)
        except ValueError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 2

    print(mint_token(secret_key, args.subject, expires_in, args.algorithm))
    return 0


if __name__ == "__main__":
    sys.exit(main())

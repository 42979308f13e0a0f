#!/usr/bin/env python3
"""
Portfolio backend -- maintenance CLI.

Usage:
  python main.py migrate
  python main.py seed-admin
  python main.py hash-password 'S3cret-pass' --rounds 12

Environment variables (see core/config.py):
  DATABASE_URL     SQLAlchemy URL of the store (default: local SQLite file)
  ADMIN_USERNAME   Username created by seed-admin
  ADMIN_PASSWORD   Password for that admin
"""

import argparse
import sys
from typing import Optional

from sqlalchemy.engine import Engine

from auth.models import Admin
from auth.store import AdminStore
from auth.tokens import REHASH_ROUNDS, hash_password
from contact.store import ContactStore
from core.config import Settings, get_settings
from core.database import create_db_engine


def migrate(engine: Engine) -> None:
    """Create the admins and contacts tables if they do not exist."""
    AdminStore(engine)
    ContactStore(engine)
    print("Migration complete: admins + contacts tables ready.")


def seed_admin(engine: Engine, settings: Settings) -> int:
    """Create the admin named by ADMIN_USERNAME. Returns a process exit code."""
    username = settings.admin_username
    password = settings.admin_password
    if not username or not password:
        print("  [!] Set ADMIN_USERNAME and ADMIN_PASSWORD in the environment or .env", file=sys.stderr)
        return 1

    store = AdminStore(engine)
    if store.get_by_username(username) is not None:
        print(f"Admin already exists: {username}")
        return 0

    store.create_admin(Admin(username=username, password_hash=hash_password(password, rounds=REHASH_ROUNDS)))
    print(f"Admin created: {username}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="portfolio-backend",
        description="Maintenance commands for the portfolio backend.",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.add_parser("migrate", help="Create database tables")
    sub.add_parser("seed-admin", help="Create the admin from ADMIN_USERNAME / ADMIN_PASSWORD")
    hash_cmd = sub.add_parser("hash-password", help="Print a bcrypt hash for a plaintext password")
    hash_cmd.add_argument("password", help="Plaintext password to hash")
    hash_cmd.add_argument(
        "--rounds",
        type=int,
        default=10,
        choices=range(4, 32),
        metavar="N",
        help="bcrypt cost factor (default: 10)",
    )
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "hash-password":
        print(hash_password(args.password, rounds=args.rounds))
        return 0

    settings = get_settings()
    engine = create_db_engine(settings.database_url)
    try:
        if args.command == "migrate":
            migrate(engine)
            return 0
        return seed_admin(engine, settings)
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())

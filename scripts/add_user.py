"""
Nash Cards — Admin Account Registration Script

Registers an account in durable storage without going through the UI, for
seeding demo machines.

Usage:
    python scripts/add_user.py --name "Ann" --email ann@x.com --password abc123
    python scripts/add_user.py --name "Ann" --email ann@x.com --password abc123 --database-url sqlite+aiosqlite:///demo.db
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Resolve project root so this script can be run from any working directory
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nashcards.auth.session_store import SessionStore
from nashcards.config import settings
from nashcards.exceptions import AuthError, ValidationError
from nashcards.models.account import SessionRecord
from nashcards.storage.kv import SqlStorage, create_schema


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Register a Nash Cards account in durable storage.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/add_user.py --name "Ann" --email ann@x.com --password abc123
  python scripts/add_user.py --name "Bo" --email bo@x.com --password secret1 --keep-session
""",
    )
    parser.add_argument("--name", type=str, required=True, help="Display name.")
    parser.add_argument("--email", type=str, required=True, help="Login email (unique).")
    parser.add_argument(
        "--password",
        type=str,
        required=True,
        help=f"Password, at least {settings.MIN_PASSWORD_LENGTH} characters.",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=settings.DATABASE_URL,
        help=f"Storage URL (default: {settings.DATABASE_URL}).",
    )
    parser.add_argument(
        "--keep-session",
        action="store_true",
        help="Leave the new account logged in instead of restoring the previous session.",
    )
    return parser.parse_args()


async def create_user(
    name: str,
    email: str,
    password: str,
    database_url: str,
    keep_session: bool = False,
) -> SessionRecord:
    """
    Sign the account up through the session store.

    Signup logs the new account in; unless keep_session is set, the session
    that was active before is put back afterwards.
    """
    engine = create_async_engine(database_url, echo=False)
    await create_schema(engine)
    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    storage = SqlStorage(session_factory)
    store = SessionStore(storage)
    await store.init()

    session_key = f"{settings.STORAGE_KEY_PREFIX}session"
    previous = await storage.get(session_key)

    try:
        session = await store.signup(name, email, password)
        if not keep_session:
            if previous is None:
                await store.logout()
            else:
                await storage.set(session_key, previous)
    finally:
        await engine.dispose()

    return session


async def main() -> None:
    args = parse_args()

    print(f"Creating account: name={args.name}, email={args.email}")

    try:
        session = await create_user(
            name=args.name,
            email=args.email,
            password=args.password,
            database_url=args.database_url,
            keep_session=args.keep_session,
        )
    except (ValidationError, AuthError) as e:
        print(f"Failed to create account: {e}", file=sys.stderr)
        sys.exit(1)

    print("Account created successfully.")
    print(f"  id    = {session.id}")
    print(f"  name  = {session.name}")
    print(f"  email = {session.email}")
    if args.keep_session:
        print("  (left logged in)")


if __name__ == "__main__":
    asyncio.run(main())

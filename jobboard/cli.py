"""Command line administration for the job board."""

import argparse
import asyncio
from typing import List, Optional

from jobboard.core.database import close_db, get_session_factory, init_db
from jobboard.core.logging_config import get_logger, setup_logging
from jobboard.services.user_service import UserService


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Job board administration tasks.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    promote = subcommands.add_parser("promote", help="Grant (or revoke) admin rights for a user")
    promote.add_argument("email", help="E-mail address of an existing account")
    promote.add_argument("--revoke", action="store_true", help="Remove admin rights instead of granting them")

    return parser.parse_args(argv)


async def promote(email: str, admin: bool = True) -> bool:
    """Set the admin flag on the account registered under ``email``.

    Returns False when no such account exists.
    """
    await init_db()
    try:
        async with get_session_factory()() as session:
            service = UserService(session)
            user = await service.get_by_email(email)
            if user is None:
                return False
            await service.set_admin(user, admin)
            await session.commit()
            return True
    finally:
        await close_db()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging()
    logger = get_logger(__name__)

    if args.command == "promote":
        admin = not args.revoke
        if not asyncio.run(promote(args.email, admin=admin)):
            logger.error("No user with that e-mail", email=args.email)
            print(f"No user registered as {args.email}")
            return 1
        print(f"{args.email}: admin={'yes' if admin else 'no'}")
        return 0

    return 2


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())

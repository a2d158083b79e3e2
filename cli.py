# cli.py
"""
Operator commands.

    python cli.py init-db
    python cli.py create-admin --phone 081234567890 --name "Admin Galeri" --password rahasia123
"""

import argparse
import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()

from core.database import AsyncSessionLocal, init_models
from core.exceptions import GaleriError
from core.logging import get_logger, setup_logging
from core.security import get_password_hash
from models.account import AccountRole, AccountStatus
from repositories.account import AccountRepository
from repositories.base import commit
from scripts.authentication_helpers import utcnow
from services.phone import mask_phone, validate_phone

logger = get_logger(__name__)


async def create_admin(phone: str, full_name: str, password: str) -> int:
    """Create an active admin account; the first admin has no one to approve it."""
    canonical = validate_phone(phone)
    async with AsyncSessionLocal() as db:
        accounts = AccountRepository(db)
        existing = await accounts.get_by_phone(canonical)
        if existing is not None:
            logger.warning("Account already exists", phone=mask_phone(canonical), role=existing.role.value)
            return 1
        account = await accounts.create(
            phone_number=canonical,
            full_name=full_name.strip(),
            password_hash=get_password_hash(password),
            now=utcnow(),
            role=AccountRole.ADMIN,
            status=AccountStatus.ACTIVE,
        )
        await commit(db, "create_admin")
        logger.info("Admin account created", account_id=account.id, phone=mask_phone(canonical))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="galeri")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="create tables for the configured database")

    admin = commands.add_parser("create-admin", help="create an active admin account")
    admin.add_argument("--phone", required=True)
    admin.add_argument("--name", required=True)
    admin.add_argument("--password", required=True)
    return parser


def main(argv=None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    if args.command == "init-db":
        asyncio.run(init_models())
        logger.info("Database tables created")
        return 0

    try:
        return asyncio.run(create_admin(args.phone, args.name, args.password))
    except GaleriError as e:
        logger.error("create-admin failed", error=e.code, message=e.message)
        return 2


if __name__ == "__main__":
    sys.exit(main())

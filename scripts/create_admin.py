#!/usr/bin/env python3
"""
Create an admin account, or promote an existing account to admin.

Admins cannot register through the API, so the first one is created here:

    python scripts/create_admin.py admin@example.com --name "Site Admin"
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from quickcourt.config import DB_PATH  # noqa: E402
from quickcourt.db import Database  # noqa: E402
from quickcourt.models import Role  # noqa: E402
from quickcourt.repositories.users import SqliteUserRepository  # noqa: E402

logger = logging.getLogger("create_admin")


async def create_admin(db_path: str, email: str, name: str) -> None:
    database = Database(db_path)
    await database.connect()
    try:
        users = SqliteUserRepository(database)
        user = await users.get_by_email(email)
        if user is None:
            user = await users.create(email, name, Role.ADMIN)
            logger.info("Created admin %s (id %d)", user.email, user.id)
        elif user.role == Role.ADMIN:
            logger.info("%s is already an admin", user.email)
        else:
            await users.set_role(user.id, Role.ADMIN)
            logger.info("Promoted %s from %s to admin", user.email, user.role.value)
    finally:
        await database.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create or promote a QuickCourt admin")
    parser.add_argument("email")
    parser.add_argument("--name", default="Administrator")
    parser.add_argument("--db", default=DB_PATH, help=f"SQLite file (default: {DB_PATH})")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    asyncio.run(create_admin(args.db, args.email.strip().lower(), args.name))


if __name__ == "__main__":
    main()

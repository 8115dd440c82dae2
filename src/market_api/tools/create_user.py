#!/usr/bin/env python3
"""
User provisioning tool: inserts a user whose password is stored as a salted hash

Usage:
    python -m market_api.tools.create_user --username alice --password s3cret
"""

import argparse
import asyncio
import getpass
import logging
import sys

from dotenv import load_dotenv

# Settings are read at import time, so the .env file must be loaded first
load_dotenv()

from market_api.database.connection import init_database, close_database
from market_api.services.users_service import UsersService


async def provision_user(username: str, password: str, database_url: str = None) -> int:
    """Create the user and return the process exit code"""
    db_pool = await init_database(database_url)
    try:
        result = await UsersService(db_pool).create_user(username, password)
    finally:
        await close_database(db_pool)

    if not result.success:
        print(f"❌ {result.error}")
        return 1

    user = result.data[0]
    print(f"✅ Created user '{user['nombre']}' with id {user['id']}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a user with a hashed password")
    parser.add_argument("--username", required=True, help="Login handle (usuarios.nombre)")
    parser.add_argument("--password", help="Password; prompted for when omitted")
    parser.add_argument("--database-url", help="Overrides DATABASE_URL")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    if not password:
        parser.error("password must not be empty")

    return asyncio.run(provision_user(args.username, password, args.database_url))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())

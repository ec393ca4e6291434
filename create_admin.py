#!/usr/bin/env python3
"""
Admin Bootstrap

Creates the first verified admin account from ADMIN_EMAIL, ADMIN_PASSWORD
and ADMIN_FULL_NAME (environment or .env). Does nothing when an account
with that email already exists.

Run with:
    python create_admin.py
"""

import asyncio
import sys

from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AdminBootstrapSettings, DatabaseSettings
from repositories.indexes import ensure_indexes
from repositories.user_repository import UserRepository
from schemas.models.user import ROLE_ADMIN, UserDoc
from shared.crypto import hash_password_async
from shared.logging import get_logger, setup_logging
from shared.validators import is_valid_email, normalize_email, validate_password

log = get_logger("community.create_admin")


async def create_admin(
    admin: AdminBootstrapSettings, db_settings: DatabaseSettings
) -> bool:
    """Create the admin account; returns False if it already existed."""
    email = normalize_email(admin.admin_email)
    if not is_valid_email(email):
        raise ValueError(f"ADMIN_EMAIL is not a valid address: {email!r}")
    password_error = validate_password(admin.admin_password)
    if password_error:
        raise ValueError(f"ADMIN_PASSWORD: {password_error}")

    client: AsyncMongoClient = AsyncMongoClient(db_settings.mongodb_uri, tz_aware=True)
    try:
        db = client[db_settings.db_name]
        await ensure_indexes(db)
        users = UserRepository(db)

        if await users.find_by_email(email) is not None:
            log.info("admin_exists", email=email)
            return False

        user_id = await users.insert(
            UserDoc(
                full_name=admin.admin_full_name,
                email=email,
                password_hash=await hash_password_async(admin.admin_password),
                role=ROLE_ADMIN,
                is_verified=True,
                is_blocked=False,
            )
        )
        log.info("admin_created", user_id=str(user_id), email=email)
        return True
    finally:
        await client.close()


def main():
    """Read settings from the environment and create the admin account."""
    setup_logging()
    try:
        created = asyncio.run(create_admin(AdminBootstrapSettings(), DatabaseSettings()))
    except Exception as e:
        print(f"Admin setup failed: {e}")
        sys.exit(1)

    if created:
        print("Admin user created successfully!")
    else:
        print("Admin user already exists")


if __name__ == "__main__":
    main()

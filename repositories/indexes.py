"""
Index definitions, applied once at startup.

users.email unique     — one account per address; the insert race loser
                         gets DuplicateKeyError
otps.user_id unique    — at most one live code per user
otps.expires_at        — supports the expired-code sweep (plain index, not
                         TTL: expiry is checked by the verification path)
<owned>.userId         — cascade deletes on account removal
"""

from __future__ import annotations

from pymongo import ASCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import OperationFailure

from repositories.otp_repository import OTPS_COLLECTION
from repositories.owned_content_repository import OWNED_COLLECTIONS, OWNER_FIELD
from repositories.user_repository import USERS_COLLECTION
from shared.logging import get_logger

log = get_logger(__name__)

INDEXES: list[tuple[str, str, dict]] = [
    (USERS_COLLECTION, "email", {"unique": True}),
    (USERS_COLLECTION, "created_at", {}),
    (OTPS_COLLECTION, "user_id", {"unique": True}),
    (OTPS_COLLECTION, "expires_at", {}),
] + [(name, OWNER_FIELD, {}) for name in OWNED_COLLECTIONS]


async def ensure_indexes(db: AsyncDatabase) -> None:
    for collection, field, options in INDEXES:
        try:
            await db[collection].create_index([(field, ASCENDING)], **options)
        except OperationFailure as e:
            # Pre-existing data that violates a unique index; the app still
            # runs, but the guarantee is missing until the data is cleaned.
            log.error(
                "index_creation_failed",
                collection=collection,
                field=field,
                error=str(e),
            )

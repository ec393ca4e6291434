"""
Cascade cleanup for documents owned by a user.

Profiles, projects and comments are managed elsewhere; this module only
knows that each of them carries the owner's id in ``userId`` and removes
them when the owning account goes away.
"""

from __future__ import annotations

from bson import ObjectId
from pymongo.asynchronous.database import AsyncDatabase

PROFILES_COLLECTION = "profiles"
PROJECTS_COLLECTION = "projects"
COMMENTS_COLLECTION = "comments"

OWNED_COLLECTIONS = (PROFILES_COLLECTION, PROJECTS_COLLECTION, COMMENTS_COLLECTION)

# Field name used by the services that write these collections.
OWNER_FIELD = "userId"


class OwnedContentRepository:
    def __init__(self, db: AsyncDatabase) -> None:
        self._db = db

    async def delete_for_user(self, user_id: ObjectId) -> dict[str, int]:
        """Delete the user's documents from every owned collection.

        Returns:
            Deleted count per collection name.
        """
        deleted: dict[str, int] = {}
        for name in OWNED_COLLECTIONS:
            result = await self._db[name].delete_many({OWNER_FIELD: user_id})
            deleted[name] = result.deleted_count
        return deleted

    async def count(self, collection: str) -> int:
        return await self._db[collection].count_documents({})

"""
Data access for the `users` collection.

Pure database operations: no HTTP, no business rules. Lookups by email
expect an already-normalised (trimmed, lowercase) address.
"""

from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from errors import ConflictError
from schemas.models.user import UserDoc
from shared.datetime_utils import utcnow

USERS_COLLECTION = "users"

# Excluded whenever a user is loaded for anything other than a password check.
_WITHOUT_PASSWORD = {"password_hash": 0}


class UserRepository:
    def __init__(self, db: AsyncDatabase) -> None:
        self._col = db[USERS_COLLECTION]

    async def find_by_email(
        self, email: str, *, with_password: bool = False
    ) -> Optional[UserDoc]:
        projection = None if with_password else _WITHOUT_PASSWORD
        doc = await self._col.find_one({"email": email}, projection)
        return UserDoc.from_mongo(doc)

    async def find_by_id(
        self, user_id: ObjectId, *, with_password: bool = False
    ) -> Optional[UserDoc]:
        projection = None if with_password else _WITHOUT_PASSWORD
        doc = await self._col.find_one({"_id": user_id}, projection)
        return UserDoc.from_mongo(doc)

    async def insert(self, user: UserDoc) -> ObjectId:
        """Insert *user* and return its new id.

        Raises:
            ConflictError: the email is already registered (including the
                race where another request inserted it after our check).
        """
        now = utcnow()
        doc = user.model_copy(update={"created_at": now, "updated_at": now})
        try:
            result = await self._col.insert_one(doc.to_mongo())
        except DuplicateKeyError as exc:
            raise ConflictError("User already exists with this email") from exc
        return result.inserted_id

    async def _update(
        self, user_id: ObjectId, fields: dict[str, Any]
    ) -> Optional[UserDoc]:
        fields = {**fields, "updated_at": utcnow()}
        doc = await self._col.find_one_and_update(
            {"_id": user_id},
            {"$set": fields},
            projection=_WITHOUT_PASSWORD,
            return_document=ReturnDocument.AFTER,
        )
        return UserDoc.from_mongo(doc)

    async def mark_verified(self, user_id: ObjectId) -> Optional[UserDoc]:
        return await self._update(user_id, {"is_verified": True})

    async def set_blocked(self, user_id: ObjectId, blocked: bool) -> Optional[UserDoc]:
        return await self._update(user_id, {"is_blocked": blocked})

    async def set_password_hash(
        self, user_id: ObjectId, password_hash: str
    ) -> Optional[UserDoc]:
        return await self._update(user_id, {"password_hash": password_hash})

    async def list_all(self) -> list[UserDoc]:
        """All users, newest first, without password hashes."""
        cursor = self._col.find({}, _WITHOUT_PASSWORD).sort("created_at", DESCENDING)
        return [UserDoc.from_mongo(doc) async for doc in cursor]

    async def count(self, query: Optional[dict[str, Any]] = None) -> int:
        return await self._col.count_documents(query or {})

    async def delete(self, user_id: ObjectId) -> bool:
        result = await self._col.delete_one({"_id": user_id})
        return result.deleted_count == 1

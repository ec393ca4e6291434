"""
Data access for the `otps` collection.

One live code per user: a unique index on user_id backs issue(), which
replaces the user's code wholesale. consume() is a single
find-and-delete, so a code can be redeemed at most once even when two
verification requests race.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo.asynchronous.database import AsyncDatabase

from schemas.models.otp import OtpDoc
from shared.crypto import hash_code
from shared.datetime_utils import utcnow

OTPS_COLLECTION = "otps"


class OtpRepository:
    def __init__(self, db: AsyncDatabase) -> None:
        self._col = db[OTPS_COLLECTION]

    async def issue(self, user_id: ObjectId, code: str, expires_at: datetime) -> OtpDoc:
        """Store *code* as the user's only live code (last write wins)."""
        otp = OtpDoc(
            user_id=user_id,
            code_hash=hash_code(code),
            expires_at=expires_at,
            created_at=utcnow(),
        )
        await self._col.replace_one({"user_id": user_id}, otp.to_mongo(), upsert=True)
        return otp

    async def consume(self, user_id: ObjectId, code: str) -> Optional[OtpDoc]:
        """Delete and return the record matching *user_id* and *code*, if any.

        The caller still has to check ``expires_at`` on the returned record.
        """
        doc = await self._col.find_one_and_delete(
            {"user_id": user_id, "code_hash": hash_code(code)}
        )
        return OtpDoc.from_mongo(doc)

    async def delete_for_user(self, user_id: ObjectId) -> int:
        result = await self._col.delete_many({"user_id": user_id})
        return result.deleted_count

    async def delete_expired(self, now: Optional[datetime] = None) -> int:
        """Sweep every code whose deadline has passed."""
        result = await self._col.delete_many({"expires_at": {"$lt": now or utcnow()}})
        return result.deleted_count

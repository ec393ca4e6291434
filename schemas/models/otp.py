"""
One-time code document model.

Maps to the `otps` MongoDB collection.

code_hash stores SHA-256(code); the plain 6-digit code is never stored.
A unique index on user_id keeps at most one live code per user. Records
are never edited: issuing replaces the whole document and a successful
verification deletes it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel, PyObjectId
from shared.datetime_utils import is_expired


class OtpDoc(MongoBaseModel):
    """Document model for the `otps` collection."""

    user_id: PyObjectId
    code_hash: str
    expires_at: datetime
    created_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return is_expired(self.expires_at, now)

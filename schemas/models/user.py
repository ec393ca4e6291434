"""
User document model.

Maps to the `users` MongoDB collection (the credential store).

- email is stored trimmed and lowercase; a unique index enforces one
  account per address.
- password_hash is an argon2 hash; the plaintext never reaches the
  database.
- is_verified flips to True once, on successful OTP verification.
- is_blocked is only changed by an admin.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from schemas.models.base import MongoBaseModel

ROLE_USER = "user"
ROLE_ADMIN = "admin"

Role = Literal["user", "admin"]


class UserDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    full_name: str
    email: str
    password_hash: Optional[str] = None
    role: Role = ROLE_USER
    is_verified: bool = False
    is_blocked: bool = False
    is_profile_complete: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

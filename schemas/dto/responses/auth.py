"""
Response DTOs for authentication endpoints.

UserResponse        — sanitized user projection (never carries the hash)
RegisterResponse    — POST /auth/register  (201)
LoginResponse       — POST /auth/login, POST /auth/admin-login  (200)
VerifyUserResponse  — GET /auth/verify-user  (200)
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.dto.responses.common import ApiModel
from schemas.models.user import UserDoc


class UserResponse(ApiModel):
    """Public view of a user document."""

    id: str
    full_name: str
    email: str
    role: str
    is_verified: bool
    is_blocked: bool
    is_profile_complete: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, user: UserDoc) -> "UserResponse":
        return cls(
            id=str(user.id),
            full_name=user.full_name,
            email=user.email,
            role=user.role,
            is_verified=user.is_verified,
            is_blocked=user.is_blocked,
            is_profile_complete=user.is_profile_complete,
            created_at=user.created_at,
        )


class RegisterData(ApiModel):
    user_id: str


class RegisterResponse(ApiModel):
    """Response body for POST /auth/register (201)."""

    success: bool = True
    message: str
    data: RegisterData


class LoginData(ApiModel):
    token: str
    user: UserResponse


class LoginResponse(ApiModel):
    """Response body for POST /auth/login and /auth/admin-login (200)."""

    success: bool = True
    message: str
    data: LoginData


class UserData(ApiModel):
    user: UserResponse


class VerifyUserResponse(ApiModel):
    """Response body for GET /auth/verify-user (200)."""

    success: bool = True
    message: str
    data: UserData

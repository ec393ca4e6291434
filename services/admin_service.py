"""
Admin-side user management: listing, block/unblock, deletion, dashboard
counts. Admin accounts cannot be blocked or deleted through here.
"""

from __future__ import annotations

from bson import ObjectId

from errors import ClientError, NotFoundError, ValidationError
from repositories.owned_content_repository import (
    PROFILES_COLLECTION,
    PROJECTS_COLLECTION,
    OwnedContentRepository,
)
from repositories.user_repository import UserRepository
from schemas.models.base import parse_object_id
from schemas.models.user import ROLE_USER, UserDoc
from services.account_service import AccountService
from shared.logging import get_logger

log = get_logger(__name__)


class AdminService:
    def __init__(
        self,
        users: UserRepository,
        owned: OwnedContentRepository,
        accounts: AccountService,
    ) -> None:
        self._users = users
        self._owned = owned
        self._accounts = accounts

    async def _load(self, user_id: str) -> UserDoc:
        oid = parse_object_id(user_id)
        if oid is None:
            raise ValidationError("Invalid user id", field="userId")
        user = await self._users.find_by_id(oid)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list_users(self) -> list[UserDoc]:
        return await self._users.list_all()

    async def block_user(self, user_id: str, admin: UserDoc) -> UserDoc:
        user = await self._load(user_id)
        if user.is_admin:
            raise ClientError("Cannot block admin users")
        updated = await self._set_blocked(user.id, True)
        log.info("user_blocked", user_id=str(user.id), admin_id=str(admin.id))
        return updated

    async def unblock_user(self, user_id: str, admin: UserDoc) -> UserDoc:
        user = await self._load(user_id)
        updated = await self._set_blocked(user.id, False)
        log.info("user_unblocked", user_id=str(user.id), admin_id=str(admin.id))
        return updated

    async def _set_blocked(self, user_id: ObjectId, blocked: bool) -> UserDoc:
        updated = await self._users.set_blocked(user_id, blocked)
        if updated is None:
            raise NotFoundError("User not found")
        return updated

    async def delete_user(self, user_id: str, admin: UserDoc) -> None:
        user = await self._load(user_id)
        if user.is_admin:
            raise ClientError("Cannot delete admin users")
        await self._accounts.delete(user.id)
        log.info("user_deleted_by_admin", user_id=str(user.id), admin_id=str(admin.id))

    async def dashboard_stats(self) -> dict[str, int]:
        return {
            "total_users": await self._users.count({"role": ROLE_USER}),
            "total_profiles": await self._owned.count(PROFILES_COLLECTION),
            "total_projects": await self._owned.count(PROJECTS_COLLECTION),
            "blocked_users": await self._users.count({"is_blocked": True}),
            "unverified_users": await self._users.count({"is_verified": False}),
        }

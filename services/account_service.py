"""
Account removal with cascade.

Deleting a user removes, in order, everything the user owns (profiles,
projects, comments), any outstanding one-time code, and finally the user
document itself. Each step is a single-collection delete; there is no
multi-document transaction.
"""

from __future__ import annotations

from bson import ObjectId

from errors import NotFoundError
from repositories.otp_repository import OtpRepository
from repositories.owned_content_repository import OwnedContentRepository
from repositories.user_repository import UserRepository
from shared.logging import get_logger

log = get_logger(__name__)


class AccountService:
    def __init__(
        self,
        users: UserRepository,
        otps: OtpRepository,
        owned: OwnedContentRepository,
    ) -> None:
        self._users = users
        self._otps = otps
        self._owned = owned

    async def delete(self, user_id: ObjectId) -> None:
        """Delete *user_id* and its owned documents.

        Raises:
            NotFoundError: no such user (including one already deleted).
        """
        if await self._users.find_by_id(user_id) is None:
            raise NotFoundError("User not found")

        removed = await self._owned.delete_for_user(user_id)
        removed["otps"] = await self._otps.delete_for_user(user_id)
        if not await self._users.delete(user_id):
            # Lost a race with a concurrent deletion.
            raise NotFoundError("User not found")

        log.info(
            "user_deleted",
            user_id=str(user_id),
            **{f"{name}_removed": count for name, count in removed.items()},
        )

"""
Shared test doubles.

In-memory stand-ins for the three repositories and an email provider that
records what it was asked to send (including the plain OTP codes), so the
services and routes can be exercised without MongoDB or SMTP.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import pytest
from bson import ObjectId

from config import JWTSettings, OtpSettings
from errors import ConflictError
from repositories.owned_content_repository import OWNED_COLLECTIONS, OWNER_FIELD
from schemas.models.otp import OtpDoc
from schemas.models.user import ROLE_ADMIN, ROLE_USER, UserDoc
from services.account_service import AccountService
from services.admin_service import AdminService
from services.auth_service import AuthService
from services.token_service import TokenService
from shared.crypto import hash_code, hash_password
from shared.datetime_utils import utcnow

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
TEST_FRONTEND_URL = "http://localhost:3000"


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.docs: dict[ObjectId, UserDoc] = {}

    @staticmethod
    def _view(user: Optional[UserDoc], with_password: bool) -> Optional[UserDoc]:
        if user is None:
            return None
        if with_password:
            return user.model_copy()
        return user.model_copy(update={"password_hash": None})

    async def find_by_email(self, email: str, *, with_password: bool = False):
        for user in self.docs.values():
            if user.email == email:
                return self._view(user, with_password)
        return None

    async def find_by_id(self, user_id: ObjectId, *, with_password: bool = False):
        return self._view(self.docs.get(user_id), with_password)

    def add(self, user: UserDoc) -> UserDoc:
        if any(u.email == user.email for u in self.docs.values()):
            raise ConflictError("User already exists with this email")
        now = utcnow()
        user_id = ObjectId()
        self.docs[user_id] = user.model_copy(
            update={"id": user_id, "created_at": now, "updated_at": now}
        )
        return self.docs[user_id]

    async def insert(self, user: UserDoc) -> ObjectId:
        return self.add(user).id

    async def _update(self, user_id: ObjectId, fields: dict[str, Any]):
        user = self.docs.get(user_id)
        if user is None:
            return None
        self.docs[user_id] = user.model_copy(update={**fields, "updated_at": utcnow()})
        return self._view(self.docs[user_id], False)

    async def mark_verified(self, user_id: ObjectId):
        return await self._update(user_id, {"is_verified": True})

    async def set_blocked(self, user_id: ObjectId, blocked: bool):
        return await self._update(user_id, {"is_blocked": blocked})

    async def set_password_hash(self, user_id: ObjectId, password_hash: str):
        return await self._update(user_id, {"password_hash": password_hash})

    async def list_all(self) -> list[UserDoc]:
        users = sorted(self.docs.values(), key=lambda u: u.created_at, reverse=True)
        return [self._view(u, False) for u in users]

    async def count(self, query: Optional[dict[str, Any]] = None) -> int:
        query = query or {}
        return sum(
            1
            for u in self.docs.values()
            if all(getattr(u, key) == value for key, value in query.items())
        )

    async def delete(self, user_id: ObjectId) -> bool:
        return self.docs.pop(user_id, None) is not None


class InMemoryOtpRepository:
    def __init__(self) -> None:
        self.docs: dict[ObjectId, OtpDoc] = {}

    async def issue(self, user_id: ObjectId, code: str, expires_at: datetime) -> OtpDoc:
        otp = OtpDoc(
            user_id=user_id,
            code_hash=hash_code(code),
            expires_at=expires_at,
            created_at=utcnow(),
        )
        self.docs[user_id] = otp
        return otp

    async def consume(self, user_id: ObjectId, code: str) -> Optional[OtpDoc]:
        otp = self.docs.get(user_id)
        if otp is None or otp.code_hash != hash_code(code):
            return None
        return self.docs.pop(user_id)

    async def delete_for_user(self, user_id: ObjectId) -> int:
        return 1 if self.docs.pop(user_id, None) is not None else 0

    async def delete_expired(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        expired = [uid for uid, otp in self.docs.items() if otp.expires_at < now]
        for uid in expired:
            del self.docs[uid]
        return len(expired)

    def expire(self, user_id: ObjectId, at: datetime) -> None:
        self.docs[user_id] = self.docs[user_id].model_copy(update={"expires_at": at})


class InMemoryOwnedContentRepository:
    def __init__(self) -> None:
        self.docs: dict[str, list[dict]] = {name: [] for name in OWNED_COLLECTIONS}

    def add(self, collection: str, user_id: ObjectId, **fields) -> None:
        self.docs[collection].append({"_id": ObjectId(), OWNER_FIELD: user_id, **fields})

    async def delete_for_user(self, user_id: ObjectId) -> dict[str, int]:
        deleted: dict[str, int] = {}
        for name, docs in self.docs.items():
            kept = [d for d in docs if d[OWNER_FIELD] != user_id]
            deleted[name] = len(docs) - len(kept)
            self.docs[name] = kept
        return deleted

    async def count(self, collection: str) -> int:
        return len(self.docs[collection])


class RecordingEmailProvider:
    """Records every send; ``fail`` makes sends report failure, ``error`` raise."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False
        self.error: Optional[Exception] = None

    async def _record(self, **message) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append(message)
        return not self.fail

    async def send_verification_email(self, email, full_name, otp_code) -> bool:
        return await self._record(
            kind="verification", email=email, full_name=full_name, otp_code=otp_code
        )

    async def send_welcome_email(self, email, full_name) -> bool:
        return await self._record(kind="welcome", email=email, full_name=full_name)

    async def send_password_reset_email(self, email, full_name, reset_url) -> bool:
        return await self._record(
            kind="password_reset", email=email, full_name=full_name, reset_url=reset_url
        )

    def of_kind(self, kind: str, email: Optional[str] = None) -> list[dict]:
        return [
            m
            for m in self.sent
            if m["kind"] == kind and (email is None or m["email"] == email)
        ]

    def last_code(self, email: str) -> str:
        return self.of_kind("verification", email)[-1]["otp_code"]

    def last_reset_token(self, email: str) -> str:
        return self.of_kind("password_reset", email)[-1]["reset_url"].rsplit("/", 1)[-1]


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def users():
    return InMemoryUserRepository()


@pytest.fixture
def otps():
    return InMemoryOtpRepository()


@pytest.fixture
def owned():
    return InMemoryOwnedContentRepository()


@pytest.fixture
def email_provider():
    return RecordingEmailProvider()


@pytest.fixture
def jwt_settings():
    return JWTSettings(jwt_secret=TEST_JWT_SECRET)


@pytest.fixture
def token_service(jwt_settings):
    return TokenService(jwt_settings)


@pytest.fixture
def account_service(users, otps, owned):
    return AccountService(users, otps, owned)


@pytest.fixture
def auth_service(users, otps, account_service, token_service, email_provider):
    return AuthService(
        users=users,
        otps=otps,
        accounts=account_service,
        tokens=token_service,
        email_provider=email_provider,
        otp_settings=OtpSettings(otp_ttl_seconds=180, otp_length=6),
        frontend_url=TEST_FRONTEND_URL,
    )


@pytest.fixture
def admin_service(users, owned, account_service):
    return AdminService(users, owned, account_service)


@pytest.fixture
def make_user(users):
    """Insert a user straight into the repository; returns the stored doc."""

    def _make(
        email: str = "alice@example.com",
        password: str = "secret123",
        full_name: str = "Alice Example",
        role: str = ROLE_USER,
        is_verified: bool = True,
        is_blocked: bool = False,
    ) -> UserDoc:
        return users.add(
            UserDoc(
                full_name=full_name,
                email=email,
                password_hash=hash_password(password),
                role=role,
                is_verified=is_verified,
                is_blocked=is_blocked,
            )
        )

    return _make


@pytest.fixture
def make_admin(make_user):
    def _make(email: str = "admin@example.com", password: str = "admin-pass", **kwargs):
        return make_user(
            email=email, password=password, full_name="Super Admin", role=ROLE_ADMIN, **kwargs
        )

    return _make

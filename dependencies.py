"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system: settings and database handles from app.state,
repositories and services built on top of them, and the bearer-token
request gate (get_current_user / require_roles).

Tests swap implementations through app.dependency_overrides.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import AppSettings
from errors import ForbiddenError
from infrastructure.email.protocol import EmailProvider
from repositories.otp_repository import OtpRepository
from repositories.owned_content_repository import OwnedContentRepository
from repositories.user_repository import UserRepository
from schemas.models.user import UserDoc
from services.account_service import AccountService
from services.admin_service import AdminService
from services.auth_service import AuthService
from services.token_service import TokenService

# auto_error=False: a missing header must produce our 401 envelope, not
# FastAPI's default 403.
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


def get_email_provider(request: Request) -> EmailProvider:
    return request.app.state.email_provider


def get_token_service(settings: AppSettings = Depends(get_settings)) -> TokenService:
    return TokenService(settings.jwt)


# ── Repositories ─────────────────────────────────────────────────────────────


def get_user_repository(db=Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_otp_repository(db=Depends(get_db)) -> OtpRepository:
    return OtpRepository(db)


def get_owned_content_repository(db=Depends(get_db)) -> OwnedContentRepository:
    return OwnedContentRepository(db)


# ── Services ─────────────────────────────────────────────────────────────────


def get_account_service(
    users: UserRepository = Depends(get_user_repository),
    otps: OtpRepository = Depends(get_otp_repository),
    owned: OwnedContentRepository = Depends(get_owned_content_repository),
) -> AccountService:
    return AccountService(users, otps, owned)


def get_auth_service(
    settings: AppSettings = Depends(get_settings),
    users: UserRepository = Depends(get_user_repository),
    otps: OtpRepository = Depends(get_otp_repository),
    accounts: AccountService = Depends(get_account_service),
    tokens: TokenService = Depends(get_token_service),
    email_provider: EmailProvider = Depends(get_email_provider),
) -> AuthService:
    return AuthService(
        users=users,
        otps=otps,
        accounts=accounts,
        tokens=tokens,
        email_provider=email_provider,
        otp_settings=settings.otp,
        frontend_url=settings.frontend_url,
    )


def get_admin_service(
    users: UserRepository = Depends(get_user_repository),
    owned: OwnedContentRepository = Depends(get_owned_content_repository),
    accounts: AccountService = Depends(get_account_service),
) -> AdminService:
    return AdminService(users, owned, accounts)


# ── Request gate ─────────────────────────────────────────────────────────────


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> UserDoc:
    """Resolve the bearer token to a non-blocked user (401/403 otherwise)."""
    token = credentials.credentials if credentials else None
    user = await auth.authenticate(token)
    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return user


def require_roles(*roles: str) -> Callable[..., Awaitable[UserDoc]]:
    """Dependency factory: authenticated user whose role is in *roles*."""
    allowed = frozenset(roles)

    async def _check_role(user: UserDoc = Depends(get_current_user)) -> UserDoc:
        if user.role not in allowed:
            raise ForbiddenError("Access denied. Insufficient permissions.")
        return user

    return _check_role

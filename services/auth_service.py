"""
Account authentication lifecycle.

register → verify_otp → login, plus resend, admin login, password reset
and bearer-token authentication for protected routes.

Every failure is raised as an AppError subclass; the route layer never
builds error responses itself. Email sends are best-effort: a failed or
crashed send is logged and never changes the outcome of the operation
that triggered it.
"""

from __future__ import annotations

from typing import Awaitable, Optional

from bson import ObjectId

from config import OtpSettings
from errors import (
    AuthenticationError,
    ClientError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from infrastructure.email.protocol import EmailProvider
from repositories.otp_repository import OtpRepository
from repositories.user_repository import UserRepository
from schemas.models.base import parse_object_id
from schemas.models.user import ROLE_ADMIN, ROLE_USER, UserDoc
from services.account_service import AccountService
from services.token_service import (
    TOKEN_TYPE_PASSWORD_RESET,
    TOKEN_TYPE_SESSION,
    TokenExpired,
    TokenInvalid,
    TokenService,
)
from shared.crypto import (
    hash_password_async,
    verify_password_against_dummy,
    verify_password_async,
)
from shared.datetime_utils import expires_in
from shared.generators import generate_otp_code
from shared.logging import get_logger
from shared.validators import (
    normalize_email,
    validate_password,
    validate_registration,
)

log = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_OTP = "Invalid or expired OTP code"
ACCOUNT_BLOCKED = "Account is blocked. Contact admin."
NO_TOKEN = "Access denied. No token provided."
INVALID_TOKEN = "Invalid token."
EXPIRED_TOKEN = "Token expired."


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        otps: OtpRepository,
        accounts: AccountService,
        tokens: TokenService,
        email_provider: EmailProvider,
        otp_settings: OtpSettings,
        frontend_url: str,
    ) -> None:
        self._users = users
        self._otps = otps
        self._accounts = accounts
        self._tokens = tokens
        self._email = email_provider
        self._otp_settings = otp_settings
        self._frontend_url = frontend_url.rstrip("/")

    # ── helpers ──────────────────────────────────────────────────────────────

    async def _dispatch(self, kind: str, user_id: ObjectId, send: Awaitable[bool]) -> bool:
        try:
            sent = await send
        except Exception as e:
            log.error(
                "email_dispatch_error",
                kind=kind,
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        if not sent:
            log.warning("email_dispatch_failed", kind=kind, user_id=str(user_id))
        return sent

    async def _issue_otp(self, user: UserDoc) -> bool:
        code = generate_otp_code(self._otp_settings.otp_length)
        await self._otps.issue(
            user.id, code, expires_in(self._otp_settings.otp_ttl_seconds)
        )
        log.info("otp_issued", user_id=str(user.id))
        return await self._dispatch(
            "verification",
            user.id,
            self._email.send_verification_email(user.email, user.full_name, code),
        )

    async def _sweep_expired_otps(self) -> None:
        # House-keeping only; verify_otp checks expiry on the record itself.
        try:
            removed = await self._otps.delete_expired()
        except Exception as e:
            log.warning("otp_sweep_failed", error=str(e), error_type=type(e).__name__)
            return
        if removed:
            log.info("otp_sweep", removed=removed)

    async def _require_user(self, email: str) -> UserDoc:
        user = await self._users.find_by_email(email)
        if user is None:
            raise NotFoundError("User not found")
        return user

    # ── registration & verification ──────────────────────────────────────────

    async def register(self, full_name: str, email: str, password: str) -> str:
        """Create an unverified account and send its first code.

        Returns:
            The new user's id.
        """
        errors = validate_registration(full_name, email, password)
        if errors:
            raise ValidationError("Validation failed!", details=errors)

        email = normalize_email(email)
        if await self._users.find_by_email(email) is not None:
            log.warning("registration_failed", reason="email_exists")
            raise ConflictError("User already exists with this email")

        user = UserDoc(
            full_name=full_name.strip(),
            email=email,
            password_hash=await hash_password_async(password),
            role=ROLE_USER,
        )
        user_id = await self._users.insert(user)
        user = user.model_copy(update={"id": user_id})
        log.info("user_registered", user_id=str(user_id))

        await self._issue_otp(user)
        return str(user_id)

    async def verify_otp(self, email: str, otp: str) -> None:
        email = normalize_email(email)
        otp = (otp or "").strip()
        if not email or not otp:
            raise ValidationError("Email and OTP are required")

        user = await self._require_user(email)
        await self._sweep_expired_otps()

        record = await self._otps.consume(user.id, otp)
        if record is None:
            log.warning("otp_verification_failed", user_id=str(user.id), reason="no_match")
            raise ClientError(INVALID_OTP)
        if record.is_expired():
            log.warning("otp_verification_failed", user_id=str(user.id), reason="expired")
            raise ClientError(INVALID_OTP)

        await self._users.mark_verified(user.id)
        log.info("otp_verified", user_id=str(user.id))

        await self._dispatch(
            "welcome", user.id, self._email.send_welcome_email(user.email, user.full_name)
        )

    async def resend_otp(self, email: str) -> None:
        email = normalize_email(email)
        if not email:
            raise ValidationError("Email is required")

        user = await self._require_user(email)
        if user.is_verified:
            raise ClientError("User is already verified")

        await self._otps.delete_for_user(user.id)
        await self._issue_otp(user)

    # ── login ────────────────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> tuple[str, UserDoc]:
        """Check credentials and issue a session token."""
        email = normalize_email(email)
        user = await self._users.find_by_email(email, with_password=True)
        if user is None:
            await verify_password_against_dummy(password or "")
            log.warning("login_failed", reason="unknown_email")
            raise AuthenticationError(INVALID_CREDENTIALS)
        if user.is_blocked:
            log.warning("login_failed", reason="blocked", user_id=str(user.id))
            raise ClientError(ACCOUNT_BLOCKED)
        if not user.is_verified:
            log.warning("login_failed", reason="unverified", user_id=str(user.id))
            raise AuthenticationError("Please verify your email first")
        if not await verify_password_async(password or "", user.password_hash or ""):
            log.warning("login_failed", reason="invalid_password", user_id=str(user.id))
            raise AuthenticationError(INVALID_CREDENTIALS)

        log.info("login_success", user_id=str(user.id))
        return self._tokens.issue_session_token(str(user.id)), user

    async def admin_login(self, email: str, password: str) -> tuple[str, UserDoc]:
        # Unlike login(), a role mismatch is reported distinctly.
        email = normalize_email(email)
        user = await self._users.find_by_email(email, with_password=True)
        if user is None:
            await verify_password_against_dummy(password or "")
            log.warning("admin_login_failed", reason="unknown_email")
            raise AuthenticationError(INVALID_CREDENTIALS)
        if user.role != ROLE_ADMIN:
            log.warning("admin_login_failed", reason="not_admin", user_id=str(user.id))
            raise ClientError("Access denied. Admin only.")
        if user.is_blocked:
            log.warning("admin_login_failed", reason="blocked", user_id=str(user.id))
            raise ClientError("Account is blocked.")
        if not await verify_password_async(password or "", user.password_hash or ""):
            log.warning("admin_login_failed", reason="invalid_password", user_id=str(user.id))
            raise AuthenticationError(INVALID_CREDENTIALS)

        log.info("admin_login_success", user_id=str(user.id))
        return self._tokens.issue_session_token(str(user.id)), user

    # ── password reset ───────────────────────────────────────────────────────

    async def forgot_password(self, email: str) -> None:
        email = normalize_email(email)
        if not email:
            raise ValidationError("Email is required")

        user = await self._require_user(email)
        reset_token = self._tokens.issue_reset_token(str(user.id))
        reset_url = f"{self._frontend_url}/reset-password/{reset_token}"
        log.info("password_reset_requested", user_id=str(user.id))

        await self._dispatch(
            "password_reset",
            user.id,
            self._email.send_password_reset_email(user.email, user.full_name, reset_url),
        )

    async def reset_password(self, token: str, password: str) -> None:
        try:
            claims = self._tokens.decode(token, TOKEN_TYPE_PASSWORD_RESET)
        except TokenExpired:
            raise ClientError("Reset token expired")
        except TokenInvalid:
            raise ClientError("Invalid reset token")

        password_error = validate_password(password)
        if password_error:
            raise ValidationError(password_error, field="password")

        user_id = parse_object_id(claims["sub"])
        if user_id is None:
            raise ClientError("Invalid reset token")

        updated = await self._users.set_password_hash(
            user_id, await hash_password_async(password)
        )
        if updated is None:
            raise NotFoundError("User not found")
        log.info("password_reset_completed", user_id=str(user_id))

    # ── bearer authentication ────────────────────────────────────────────────

    async def authenticate(self, token: Optional[str]) -> UserDoc:
        """Resolve a session token to its (non-blocked) user.

        Raises:
            AuthenticationError: missing, invalid or expired token, or the
                user no longer exists.
            ForbiddenError: the user is blocked.
        """
        if not token:
            raise AuthenticationError(NO_TOKEN)
        try:
            claims = self._tokens.decode(token, TOKEN_TYPE_SESSION)
        except TokenExpired:
            raise AuthenticationError(EXPIRED_TOKEN)
        except TokenInvalid:
            raise AuthenticationError(INVALID_TOKEN)

        user_id = parse_object_id(claims["sub"])
        user = await self._users.find_by_id(user_id) if user_id is not None else None
        if user is None:
            log.warning("auth_failed", reason="user_not_found")
            raise AuthenticationError(INVALID_TOKEN)
        if user.is_blocked:
            log.warning("auth_failed", reason="blocked", user_id=str(user.id))
            raise ForbiddenError(ACCOUNT_BLOCKED)
        return user

    # ── account removal ──────────────────────────────────────────────────────

    async def delete_account(self, current_user: UserDoc, user_id: str) -> None:
        """Delete the caller's own account and everything it owns."""
        target = parse_object_id(user_id)
        if target is None or target != current_user.id:
            raise ForbiddenError("You can only delete your own account")
        await self._accounts.delete(target)

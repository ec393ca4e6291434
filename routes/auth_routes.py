"""
Authentication endpoints, mounted under /api/v1/auth.

POST   /register                 — create account, send code      (201)
POST   /verify-otp               — redeem code, mark verified     (200)
POST   /resend-otp               — replace code, send again       (200)
POST   /login                    — session token + user           (200)
POST   /admin-login              — same, admins only              (200)
POST   /forgot-password          — email a reset link             (200)
POST   /reset-password/{token}   — set a new password             (200)
GET    /verify-user              — current user (bearer)          (200)
DELETE /delete-account/{user_id} — delete own account (bearer)    (200)

Handlers only translate between DTOs and AuthService; all failures are
AppErrors rendered by the global handlers.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from dependencies import get_auth_service, get_current_user, require_roles
from schemas.dto.requests.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResendOtpRequest,
    ResetPasswordRequest,
    VerifyOtpRequest,
)
from schemas.dto.responses.auth import (
    LoginData,
    LoginResponse,
    RegisterData,
    RegisterResponse,
    UserData,
    UserResponse,
    VerifyUserResponse,
)
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from schemas.models.user import ROLE_USER, UserDoc
from services.auth_service import AuthService

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["auth"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)


@router.post(
    "/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse
)
async def register(
    body: RegisterRequest, auth: AuthService = Depends(get_auth_service)
) -> RegisterResponse:
    user_id = await auth.register(body.full_name, body.email, body.password)
    return RegisterResponse(
        message="Registration successful. Please check your email for verification code.",
        data=RegisterData(user_id=user_id),
    )


@router.post("/verify-otp", response_model=MessageResponse)
async def verify_otp(
    body: VerifyOtpRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.verify_otp(body.email, body.otp)
    return MessageResponse(message="Email verified successfully! You can now login.")


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(
    body: ResendOtpRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.resend_otp(body.email)
    return MessageResponse(message="New OTP sent to your email")


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest, auth: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    token, user = await auth.login(body.email, body.password)
    return LoginResponse(
        message="Login successful",
        data=LoginData(token=token, user=UserResponse.from_doc(user)),
    )


@router.post("/admin-login", response_model=LoginResponse)
async def admin_login(
    body: LoginRequest, auth: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    token, user = await auth.admin_login(body.email, body.password)
    return LoginResponse(
        message="Admin login successful",
        data=LoginData(token=token, user=UserResponse.from_doc(user)),
    )


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.forgot_password(body.email)
    return MessageResponse(message="Password reset email sent")


@router.post("/reset-password/{token}", response_model=MessageResponse)
async def reset_password(
    token: str,
    body: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth.reset_password(token, body.password)
    return MessageResponse(message="Password reset successful")


@router.get("/verify-user", response_model=VerifyUserResponse)
async def verify_user(user: UserDoc = Depends(get_current_user)) -> VerifyUserResponse:
    return VerifyUserResponse(
        message="User verified successfully",
        data=UserData(user=UserResponse.from_doc(user)),
    )


@router.delete("/delete-account/{user_id}", response_model=MessageResponse)
async def delete_account(
    user_id: str,
    user: UserDoc = Depends(require_roles(ROLE_USER)),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth.delete_account(user, user_id)
    return MessageResponse(message="User and all associated data deleted successfully")

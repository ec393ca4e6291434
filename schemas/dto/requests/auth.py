"""
Request DTOs for authentication endpoints.

RegisterRequest         — POST /auth/register
VerifyOtpRequest        — POST /auth/verify-otp
ResendOtpRequest        — POST /auth/resend-otp
LoginRequest            — POST /auth/login, POST /auth/admin-login
ForgotPasswordRequest   — POST /auth/forgot-password
ResetPasswordRequest    — POST /auth/reset-password/{token}

Field presence and type are enforced here; trimming, length and format
rules live in the service layer so every entry point shares them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(alias="fullName")
    email: str
    password: str


class VerifyOtpRequest(BaseModel):
    """Request body for POST /auth/verify-otp.

    ``otp`` is the 6-digit code sent to the user's email address.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str
    otp: str


class ResendOtpRequest(BaseModel):
    """Request body for POST /auth/resend-otp."""

    model_config = ConfigDict(populate_by_name=True)

    email: str


class LoginRequest(BaseModel):
    """Request body for POST /auth/login and POST /auth/admin-login."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    """Request body for POST /auth/forgot-password."""

    model_config = ConfigDict(populate_by_name=True)

    email: str


class ResetPasswordRequest(BaseModel):
    """Request body for POST /auth/reset-password/{token}."""

    model_config = ConfigDict(populate_by_name=True)

    password: str

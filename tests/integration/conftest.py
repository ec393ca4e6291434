"""
Integration test app.

Builds the real routers and error handlers on a bare FastAPI app and swaps
the repository and email dependencies for the in-memory doubles from
tests/conftest.py. No network connections are made.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from config import (
    AppSettings,
    DatabaseSettings,
    JWTSettings,
    LoggingSettings,
    OtpSettings,
    SentrySettings,
    SmtpSettings,
)
from dependencies import (
    get_email_provider,
    get_otp_repository,
    get_owned_content_repository,
    get_user_repository,
)
from errors import register_error_handlers
from routes.admin_routes import router as admin_router
from routes.auth_routes import router as auth_router
from shared.log_context import setup_request_logging


def make_settings(jwt_settings: JWTSettings) -> AppSettings:
    return AppSettings(
        frontend_url="http://localhost:3000",
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/"),
        jwt=jwt_settings,
        otp=OtpSettings(otp_ttl_seconds=180, otp_length=6),
        smtp=SmtpSettings(
            smtp_host="smtp.example.com",
            smtp_username="mailer",
            smtp_password="mailer-pass",
            smtp_from_email="no-reply@example.com",
        ),
        logging=LoggingSettings(),
        sentry=SentrySettings(sentry_dsn=""),
    )


def _build_test_app(settings, users, otps, owned, email_provider) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.email_provider = email_provider
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    setup_request_logging(app)
    register_error_handlers(app)
    app.include_router(auth_router)
    app.include_router(admin_router)

    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_otp_repository] = lambda: otps
    app.dependency_overrides[get_owned_content_repository] = lambda: owned
    app.dependency_overrides[get_email_provider] = lambda: email_provider
    return app


@pytest.fixture
def settings(jwt_settings) -> AppSettings:
    return make_settings(jwt_settings)


@pytest.fixture
def client(settings, users, otps, owned, email_provider):
    app = _build_test_app(settings, users, otps, owned, email_provider)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c

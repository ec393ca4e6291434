"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

Secrets and credentials have no defaults: building AppSettings without
MONGODB_URI, JWT_SECRET, FRONTEND_URL or the SMTP credentials raises a
pydantic ValidationError, so the process fails at startup instead of
running with a baked-in credential.
"""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _require_non_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be blank")
    return value.strip()


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "community-learning"

    @field_validator("mongodb_uri")
    @classmethod
    def _check_uri(cls, value: str) -> str:
        return _require_non_blank(value)


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_secret: str
    jwt_issuer: str = "community-learning"
    jwt_audience: str = "community-learning.api"
    jwt_algorithm: str = "HS256"
    session_token_ttl_seconds: int = 604800  # 7 days
    reset_token_ttl_seconds: int = 3600

    @field_validator("jwt_secret")
    @classmethod
    def _check_secret(cls, value: str) -> str:
        return _require_non_blank(value)


class OtpSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    otp_ttl_seconds: int = 180
    otp_length: int = 6


class SmtpSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    smtp_host: str
    smtp_port: int = 587
    smtp_username: str
    smtp_password: str
    smtp_from_email: str
    smtp_from_name: str = "Community Learning Platform"
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    smtp_timeout_seconds: float = 30.0

    @field_validator("smtp_host", "smtp_username", "smtp_password", "smtp_from_email")
    @classmethod
    def _check_required(cls, value: str) -> str:
        return _require_non_blank(value)

    @model_validator(mode="after")
    def _check_transport(self) -> "SmtpSettings":
        if self.smtp_use_tls and self.smtp_use_ssl:
            raise ValueError("SMTP_USE_TLS and SMTP_USE_SSL are mutually exclusive")
        return self


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1


class AdminBootstrapSettings(BaseSettings):
    """Only read by create_admin.py; the API never needs these."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    admin_email: str
    admin_password: str
    admin_full_name: str = "Super Admin"

    @field_validator("admin_email", "admin_password")
    @classmethod
    def _check_required(cls, value: str) -> str:
        return _require_non_blank(value)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "Community Learning Platform"
    frontend_url: str

    # OpenAPI docs URL (None disables it; always off in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    otp: Optional[OtpSettings] = None
    smtp: Optional[SmtpSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @field_validator("frontend_url")
    @classmethod
    def _normalise_frontend_url(cls, value: str) -> str:
        return _require_non_blank(value).rstrip("/")

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.otp is None:
            self.otp = OtpSettings()
        if self.smtp is None:
            self.smtp = SmtpSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def cors_origins(self) -> list[str]:
        return [self.frontend_url]

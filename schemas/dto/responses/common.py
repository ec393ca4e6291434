"""
Common response DTOs shared across multiple endpoints.

ApiModel         — base with camelCase JSON aliases
ErrorResponse    — standard error shape from AppError.to_dict()
HealthResponse   — GET /health
MessageResponse  — {success, message} shape used by most endpoints
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Response base: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ErrorResponse(BaseModel):
    """Standard error JSON body produced by the AppError exception handler."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    message: str
    code: str
    field: Optional[str] = None
    errors: Optional[Any] = None


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    status: str
    checks: dict[str, str]


class MessageResponse(ApiModel):
    """Generic success/message response returned by several endpoints."""

    success: bool = True
    message: str

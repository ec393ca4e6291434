"""
Input normalisation and validation for account fields (pure functions).

validate_registration returns a ``{field: message}`` mapping so callers can
surface every problem at once; an empty mapping means the form is acceptable.
"""

from __future__ import annotations

from typing import Optional

import validators as _validators

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128


def normalize_email(email: Optional[str]) -> str:
    """Trim and lowercase *email*; ``None`` becomes ``""``."""
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(email) and bool(_validators.email(email))


def validate_password(password: Optional[str]) -> Optional[str]:
    """Return an error message for *password*, or ``None`` when it is acceptable."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if len(password) > MAX_PASSWORD_LENGTH:
        return f"Password must be at most {MAX_PASSWORD_LENGTH} characters long"
    return None


def validate_registration(
    full_name: Optional[str], email: Optional[str], password: Optional[str]
) -> dict[str, str]:
    """Check the registration form.

    Args:
        full_name: Display name; must be non-empty after trimming.
        email: Must be non-empty after trimming and look like an address.
        password: At least ``MIN_PASSWORD_LENGTH`` characters.

    Returns:
        Mapping of camelCase field name to error message.
    """
    errors: dict[str, str] = {}

    if not (full_name or "").strip():
        errors["fullName"] = "Full name is required"

    normalized = normalize_email(email)
    if not normalized:
        errors["email"] = "Email is required"
    elif not is_valid_email(normalized):
        errors["email"] = "Email is not a valid address"

    password_error = validate_password(password)
    if password_error:
        errors["password"] = password_error

    return errors

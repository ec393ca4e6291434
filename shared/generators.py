"""
Random code generators.

Everything here draws from the ``secrets`` module.
"""

from __future__ import annotations

import secrets
import string


def generate_otp_code(length: int = 6) -> str:
    """Generate a uniformly random numeric OTP.

    Each digit is drawn independently, so leading zeros are kept and the
    result is always exactly *length* characters.

    Args:
        length: Number of digits (default 6).

    Returns:
        String of random decimal digits.
    """
    if length < 1:
        raise ValueError("OTP length must be positive")
    return "".join(secrets.choice(string.digits) for _ in range(length))


def generate_request_id() -> str:
    """Short random id used to correlate log lines for one request."""
    return f"req_{secrets.token_hex(6)}"

"""
Password and one-time-code hashing.

Passwords use argon2id (argon2-cffi); OTP codes are stored as SHA-256
digests so the plaintext code only exists in memory and in the email.
"""

from __future__ import annotations

import asyncio
import hashlib
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()
_dummy_hash: Optional[str] = None


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and salt).
    """
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check *plain_password* against a stored argon2 hash.

    Any mismatch or malformed hash is reported as ``False``; an empty hash
    never matches.
    """
    if not password_hash:
        return False
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def hash_code(code: str) -> str:
    """Return the hex SHA-256 digest of an OTP *code*."""
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


async def hash_password_async(plain_password: str) -> str:
    """Run :func:`hash_password` in a worker thread."""
    return await asyncio.to_thread(hash_password, plain_password)


async def verify_password_async(plain_password: str, password_hash: str) -> bool:
    """Run :func:`verify_password` in a worker thread."""
    return await asyncio.to_thread(verify_password, plain_password, password_hash)


async def verify_password_against_dummy(plain_password: str) -> None:
    """Spend one argon2 verification when there is no stored hash to check.

    Keeps the unknown-email path of a login about as slow as the
    wrong-password path.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = await hash_password_async("dummy-password-never-matches")
    await verify_password_async(plain_password, _dummy_hash)

"""
Signed, stateless tokens (PyJWT, HS256).

Two kinds share one secret and are told apart by the ``type`` claim:

- session         — issued at login, carried as a bearer token
- password_reset  — short-lived, embedded in the reset link

There is no server-side revocation list: a token is valid until ``exp``
passes or the secret is rotated.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

import jwt

from config import JWTSettings
from shared.datetime_utils import utcnow

TOKEN_TYPE_SESSION = "session"
TOKEN_TYPE_PASSWORD_RESET = "password_reset"


class TokenError(Exception):
    """Base for token decoding failures."""


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


class TokenService:
    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    def _issue(self, user_id: str, token_type: str, ttl_seconds: int) -> str:
        now = utcnow()
        claims = {
            "iss": self._settings.jwt_issuer,
            "aud": self._settings.jwt_audience,
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=ttl_seconds)).timestamp()),
            "type": token_type,
        }
        return jwt.encode(
            claims, self._settings.jwt_secret, algorithm=self._settings.jwt_algorithm
        )

    def issue_session_token(self, user_id: str) -> str:
        return self._issue(
            user_id, TOKEN_TYPE_SESSION, self._settings.session_token_ttl_seconds
        )

    def issue_reset_token(self, user_id: str) -> str:
        return self._issue(
            user_id, TOKEN_TYPE_PASSWORD_RESET, self._settings.reset_token_ttl_seconds
        )

    def decode(self, token: Optional[str], expected_type: str) -> dict[str, Any]:
        """Verify signature, expiry, issuer, audience and token type.

        Raises:
            TokenExpired: the signature is valid but ``exp`` has passed.
            TokenInvalid: anything else (bad signature, malformed, wrong
                audience/issuer, wrong type, missing subject).
        """
        if not token:
            raise TokenInvalid("missing token")
        try:
            claims = jwt.decode(
                token,
                self._settings.jwt_secret,
                algorithms=[self._settings.jwt_algorithm],
                audience=self._settings.jwt_audience,
                issuer=self._settings.jwt_issuer,
                options={"require": ["exp", "sub", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(str(exc)) from exc

        if claims.get("type") != expected_type:
            raise TokenInvalid(f"expected a {expected_type} token")
        return claims

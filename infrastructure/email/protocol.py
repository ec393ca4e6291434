"""EmailProvider protocol. Services depend on this, not on a concrete transport."""

from typing import Protocol


class EmailProvider(Protocol):
    async def send_verification_email(
        self, email: str, full_name: str, otp_code: str
    ) -> bool: ...

    async def send_welcome_email(self, email: str, full_name: str) -> bool: ...

    async def send_password_reset_email(
        self, email: str, full_name: str, reset_url: str
    ) -> bool: ...

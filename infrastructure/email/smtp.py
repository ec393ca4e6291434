"""SMTP implementation of EmailProvider.

- HTML bodies are rendered from the Jinja2 templates shipped next to this
  module, with a plain-text alternative part.
- smtplib is blocking, so each send runs in a worker thread.
- Connection mode follows SmtpSettings: implicit SSL (typically port 465)
  or plain + STARTTLS (typically port 587).
- A failed send is logged and reported as False; it never raises.
"""

import asyncio
import os
import smtplib
from email.message import EmailMessage
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import SmtpSettings
from shared.logging import get_logger

log = get_logger(__name__)

_DEFAULT_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")


class SmtpEmailProvider:
    def __init__(
        self,
        settings: SmtpSettings,
        app_name: str = "Community Learning Platform",
        otp_ttl_seconds: int = 180,
        reset_ttl_seconds: int = 3600,
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._app_name = app_name
        self._otp_minutes = max(1, otp_ttl_seconds // 60)
        self._reset_minutes = max(1, reset_ttl_seconds // 60)
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def _build_message(
        self, to_email: str, subject: str, text_body: str, html_body: Optional[str]
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = f"{self._settings.smtp_from_name} <{self._settings.smtp_from_email}>"
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(text_body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")
        return msg

    def _connect(self) -> smtplib.SMTP:
        s = self._settings
        if s.smtp_use_ssl:
            return smtplib.SMTP_SSL(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout_seconds)
        server = smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout_seconds)
        if s.smtp_use_tls:
            try:
                server.starttls()
            except (smtplib.SMTPException, OSError):
                server.close()
                raise
        return server

    def _deliver(self, msg: EmailMessage) -> None:
        server = self._connect()
        try:
            server.login(self._settings.smtp_username, self._settings.smtp_password)
            server.send_message(msg)
        finally:
            try:
                server.quit()
            except smtplib.SMTPException:
                # Connection is being torn down anyway.
                pass

    async def _send(
        self,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> bool:
        msg = self._build_message(to_email, subject, text_body, html_body)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        log.info("email_sent_success", to_email=to_email, subject=subject)
        return True

    def _render(self, template_name: str, **context) -> str:
        template = self._jinja.get_template(template_name)
        return template.render(app_name=self._app_name, **context)

    async def send_verification_email(
        self, email: str, full_name: str, otp_code: str
    ) -> bool:
        subject = f"Email Verification - {self._app_name}"
        html_body = self._render(
            "verification.html",
            full_name=full_name,
            otp_code=otp_code,
            expires_minutes=self._otp_minutes,
        )
        text_body = (
            f"Hello {full_name}!\n\n"
            f"Thank you for registering with the {self._app_name}.\n\n"
            f"Your verification code is: {otp_code}\n\n"
            f"This code will expire in {self._otp_minutes} minutes.\n"
            f"If you didn't request this verification, please ignore this email.\n\n"
            f"Best regards,\n{self._app_name} Team"
        )
        return await self._send(email, subject, text_body, html_body)

    async def send_welcome_email(self, email: str, full_name: str) -> bool:
        subject = f"Welcome to {self._app_name}!"
        html_body = self._render("welcome.html", full_name=full_name)
        text_body = (
            f"Welcome {full_name}!\n\n"
            f"Your email has been successfully verified.\n"
            f"Get started by logging into your account!\n\n"
            f"Best regards,\n{self._app_name} Team"
        )
        return await self._send(email, subject, text_body, html_body)

    async def send_password_reset_email(
        self, email: str, full_name: str, reset_url: str
    ) -> bool:
        subject = f"Password Reset Request - {self._app_name}"
        html_body = self._render(
            "password_reset.html",
            full_name=full_name,
            reset_url=reset_url,
            expires_minutes=self._reset_minutes,
        )
        text_body = (
            f"Hello {full_name}!\n\n"
            f"You requested a password reset for your {self._app_name} account.\n\n"
            f"Reset your password here: {reset_url}\n\n"
            f"This link will expire in {self._reset_minutes} minutes.\n"
            f"If you didn't request this reset, please ignore this email.\n\n"
            f"Best regards,\n{self._app_name} Team"
        )
        return await self._send(email, subject, text_body, html_body)

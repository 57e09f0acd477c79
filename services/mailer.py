from __future__ import annotations

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import NamedTuple, Optional, Protocol

import requests

from core.config import AppSettings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboundEmail:
    from_address: str
    to: str
    subject: str
    html: str
    reply_to: Optional[str] = None


class EmailSendResult(NamedTuple):
    success: bool
    provider_message_id: str | None = None
    error_message: str | None = None


class Mailer(Protocol):
    """Outbound mail collaborator. Implementations never raise on delivery failure."""

    name: str

    async def send(self, message: OutboundEmail) -> EmailSendResult:
        ...

    async def verify(self) -> bool:
        ...


class SMTPMailer:
    """SMTP email sender (supports Gmail / generic SMTP)."""

    name = "smtp"

    def __init__(self, settings: AppSettings) -> None:
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_username
        self.smtp_pass = settings.smtp_password
        self.timeout = settings.mail_send_timeout_seconds

    def _build_message(self, message: OutboundEmail) -> tuple[EmailMessage, str]:
        msg = EmailMessage()
        msg["From"] = message.from_address
        msg["To"] = message.to
        msg["Subject"] = message.subject
        if message.reply_to:
            msg["Reply-To"] = message.reply_to
        message_id = make_msgid()
        msg["Message-ID"] = message_id
        msg.set_content("This message requires an HTML-capable email client.")
        msg.add_alternative(message.html, subtype="html")
        return msg, message_id

    def _send_sync(self, message: OutboundEmail) -> EmailSendResult:
        try:
            msg, message_id = self._build_message(message)
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as s:
                s.ehlo(); s.starttls(); s.ehlo(); s.login(self.smtp_user, self.smtp_pass); s.send_message(msg)
            logger.info("mail.sent", extra={"transport": self.name, "to": message.to, "message_id": message_id})
            return EmailSendResult(True, message_id)
        except Exception as exc:
            logger.error("mail.send_failed", extra={"transport": self.name, "to": message.to, "error": str(exc)})
            return EmailSendResult(False, None, str(exc))

    async def send(self, message: OutboundEmail) -> EmailSendResult:
        return await asyncio.to_thread(self._send_sync, message)

    def _verify_sync(self) -> bool:
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as s:
                s.ehlo(); s.starttls(); s.ehlo(); s.login(self.smtp_user, self.smtp_pass)
            return True
        except Exception as exc:
            logger.error("mail.transport_unavailable", extra={"transport": self.name, "error": str(exc)})
            return False

    async def verify(self) -> bool:
        return await asyncio.to_thread(self._verify_sync)


class ResendMailer:
    """Resend HTTP send-API client."""

    name = "resend"

    def __init__(self, settings: AppSettings) -> None:
        self.api_key = settings.resend_api_key
        self.api_url = settings.resend_api_url
        self.timeout = settings.mail_send_timeout_seconds

    def _send_sync(self, message: OutboundEmail) -> EmailSendResult:
        payload = {
            "from": message.from_address,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.reply_to:
            payload["reply_to"] = message.reply_to
        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            message_id = response.json().get("id")
        except (requests.RequestException, ValueError) as exc:
            logger.error("mail.send_failed", extra={"transport": self.name, "to": message.to, "error": str(exc)})
            return EmailSendResult(False, None, str(exc))
        logger.info("mail.sent", extra={"transport": self.name, "to": message.to, "message_id": message_id})
        return EmailSendResult(True, message_id)

    async def send(self, message: OutboundEmail) -> EmailSendResult:
        return await asyncio.to_thread(self._send_sync, message)

    async def verify(self) -> bool:
        # The send API has no cheap readiness probe; a configured key is all we can check
        return bool(self.api_key)


def build_mailer(settings: AppSettings) -> Mailer:
    if settings.mail_transport == "smtp":
        return SMTPMailer(settings)
    return ResendMailer(settings)

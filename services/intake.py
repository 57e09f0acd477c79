from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from core.config import AppSettings
from schemas.booking import BookingRequest
from services.mailer import EmailSendResult, Mailer, OutboundEmail
from services.notifications import BookingNotificationRenderer, NotificationMessage


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchOutcome:
    client: EmailSendResult
    admin: EmailSendResult

    @property
    def success(self) -> bool:
        # No partial-success response exists, so one failed send fails the booking
        return self.client.success and self.admin.success

    @property
    def delivery_id(self) -> Optional[str]:
        return self.admin.provider_message_id or self.client.provider_message_id


class BookingIntake:
    """Renders both booking notifications and sends them concurrently."""

    def __init__(
        self,
        settings: AppSettings,
        mailer: Mailer,
        renderer: BookingNotificationRenderer | None = None,
    ) -> None:
        self.settings = settings
        self.mailer = mailer
        self.renderer = renderer or BookingNotificationRenderer(settings)

    @property
    def sender(self) -> str:
        return f"{self.settings.from_name} <{self.settings.from_email}>"

    async def _send(self, message: NotificationMessage) -> EmailSendResult:
        outbound = OutboundEmail(
            from_address=self.sender,
            to=message.to,
            subject=message.subject,
            html=message.html,
            reply_to=message.reply_to,
        )
        try:
            return await asyncio.wait_for(
                self.mailer.send(outbound), timeout=self.settings.mail_send_timeout_seconds
            )
        except asyncio.TimeoutError:
            return EmailSendResult(False, None, f"send timed out after {self.settings.mail_send_timeout_seconds}s")
        except Exception as exc:
            logger.exception("mail.send_crashed", extra={"transport": self.mailer.name, "to": message.to})
            return EmailSendResult(False, None, str(exc))

    async def dispatch(self, booking: BookingRequest) -> DispatchOutcome:
        client_message, admin_message = self.renderer.render(booking)
        logger.info(
            "booking.dispatching",
            extra={"email": booking.email, "admin": admin_message.to, "transport": self.mailer.name},
        )
        client_result, admin_result = await asyncio.gather(
            self._send(client_message), self._send(admin_message)
        )
        outcome = DispatchOutcome(client=client_result, admin=admin_result)
        if outcome.success:
            logger.info("booking.dispatched", extra={"email": booking.email, "id": outcome.delivery_id})
        else:
            logger.error(
                "booking.dispatch_failed",
                extra={
                    "email": booking.email,
                    "client_error": client_result.error_message,
                    "admin_error": admin_result.error_message,
                },
            )
        return outcome

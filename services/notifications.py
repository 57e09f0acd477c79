"""Rendering of the two booking notifications.

Templates live in ``services/templates`` and are rendered with Jinja2
autoescaping, so every submitted value is HTML-escaped at interpolation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from core.config import AppSettings
from schemas.booking import BookingRequest


logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
NOT_PROVIDED = "N/A"


@dataclass(frozen=True)
class NotificationMessage:
    to: str
    subject: str
    html: str
    reply_to: Optional[str] = None


class BookingNotificationRenderer:
    def __init__(self, settings: AppSettings, template_dir: Path = TEMPLATE_DIR) -> None:
        self.settings = settings
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(enabled_extensions=("html", "html.j2"), default=True),
            undefined=StrictUndefined,
        )

    def _base_context(self) -> dict:
        return {
            "company_name": self.settings.company_name,
            "contact_email": self.settings.support_email,
            "year": datetime.now(timezone.utc).year,
        }

    def render_client_message(self, booking: BookingRequest) -> NotificationMessage:
        html = self.env.get_template("booking_client.html.j2").render(
            booking=booking, **self._base_context()
        )
        return NotificationMessage(
            to=booking.email,
            subject=f"Booking Confirmation: {booking.full_name} - {booking.organization_label}",
            html=html,
        )

    def render_admin_message(self, booking: BookingRequest) -> NotificationMessage:
        rows = [
            ("Name", booking.full_name),
            ("Email", booking.email),
            ("Phone", booking.phone),
            ("Organization", booking.organization),
            ("Service", booking.service_type),
            ("Date", booking.preferred_date),
            ("Time", booking.preferred_time),
            ("Notes", booking.notes),
        ]
        html = self.env.get_template("booking_admin.html.j2").render(
            rows=rows, placeholder=NOT_PROVIDED, **self._base_context()
        )
        return NotificationMessage(
            to=self.settings.admin_email or "",
            subject=f"New Booking: {booking.full_name} - {booking.organization_label}",
            html=html,
            reply_to=booking.email,
        )

    def render(self, booking: BookingRequest) -> tuple[NotificationMessage, NotificationMessage]:
        return self.render_client_message(booking), self.render_admin_message(booking)

from __future__ import annotations

# Re-export key service classes for convenient imports
from .gatekeeper import BookingGatekeeper
from .intake import BookingIntake
from .mailer import ResendMailer, SMTPMailer, build_mailer
from .notifications import BookingNotificationRenderer

__all__ = [
    "BookingGatekeeper",
    "BookingIntake",
    "BookingNotificationRenderer",
    "ResendMailer",
    "SMTPMailer",
    "build_mailer",
]

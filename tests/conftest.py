"""
Pytest configuration and shared fixtures for tests
"""

import os

# main builds a module-level app at import time; give it a complete configuration
os.environ.setdefault("MAIL_TRANSPORT", "resend")
os.environ.setdefault("RESEND_API_KEY", "re_test_key")
os.environ.setdefault("FROM_EMAIL", "bookings@altura.example.com")
os.environ.setdefault("ADMIN_EMAIL", "admin@altura.example.com")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("MAIL_VERIFY_ON_STARTUP", "false")

import pytest
from fastapi.testclient import TestClient

from core.config import AppSettings
from main import create_app
from services.mailer import EmailSendResult, OutboundEmail


class RecordingMailer:
    """Mail collaborator double that records every message it is asked to send"""

    name = "recording"

    def __init__(self, fail_for: set[str] | None = None, error: str = "550 mailbox unavailable") -> None:
        self.sent: list[OutboundEmail] = []
        self.fail_for = fail_for or set()
        self.error = error

    async def send(self, message: OutboundEmail) -> EmailSendResult:
        self.sent.append(message)
        if message.to in self.fail_for:
            return EmailSendResult(False, None, self.error)
        return EmailSendResult(True, f"msg-{len(self.sent)}")

    async def verify(self) -> bool:
        return True


@pytest.fixture(name="settings")
def settings_fixture():
    """Explicit settings independent of the process environment"""
    return AppSettings(
        MAIL_TRANSPORT="resend",
        RESEND_API_KEY="re_test_key",
        FROM_EMAIL="bookings@altura.example.com",
        FROM_NAME="Altura Booking System",
        ADMIN_EMAIL="admin@altura.example.com",
        CONTACT_EMAIL="hello@altura.example.com",
        ALLOWED_ORIGINS="http://localhost:5178,https://altura.example.com",
        TRUST_FORWARDED_FOR=True,
        ENVIRONMENT="test",
        PORT=5050,
        MAIL_VERIFY_ON_STARTUP=False,
    )


@pytest.fixture(name="mailer")
def mailer_fixture():
    return RecordingMailer()


@pytest.fixture(name="app")
def app_fixture(settings, mailer):
    return create_app(settings=settings, mailer=mailer)


@pytest.fixture(name="client")
def client_fixture(app):
    return TestClient(app)


@pytest.fixture(name="valid_payload")
def valid_payload_fixture():
    return {
        "fullName": "Jane Doe",
        "email": "jane@x.com",
        "serviceType": "Consult",
        "preferredDate": "2025-01-10",
        "preferredTime": "10:00",
    }

"""
Tests for concurrent notification dispatch
"""

import asyncio

import pytest

from schemas.booking import BookingRequest
from services.intake import BookingIntake
from services.mailer import EmailSendResult


class SlowMailer:
    name = "slow"

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.started = 0

    async def send(self, message):
        self.started += 1
        await asyncio.sleep(self.delay)
        return EmailSendResult(True, "late")

    async def verify(self):
        return True


class ExplodingMailer:
    name = "exploding"

    async def send(self, message):
        raise RuntimeError("provider SDK crashed")

    async def verify(self):
        return True


@pytest.fixture(name="booking")
def booking_fixture(valid_payload):
    return BookingRequest(**valid_payload)


@pytest.mark.asyncio
async def test_both_messages_are_sent(settings, mailer, booking):
    outcome = await BookingIntake(settings, mailer).dispatch(booking)

    assert outcome.success
    assert outcome.delivery_id is not None
    assert sorted(m.to for m in mailer.sent) == ["admin@altura.example.com", "jane@x.com"]


@pytest.mark.asyncio
async def test_partial_failure_fails_the_booking(settings, mailer, booking):
    mailer.fail_for = {"jane@x.com"}

    outcome = await BookingIntake(settings, mailer).dispatch(booking)

    assert not outcome.success
    assert outcome.admin.success
    assert outcome.client.error_message == "550 mailbox unavailable"


@pytest.mark.asyncio
async def test_sends_are_bounded_by_timeout(settings, booking):
    fast_settings = settings.model_copy(update={"mail_send_timeout_seconds": 0.05})
    mailer = SlowMailer(delay=1.0)

    outcome = await BookingIntake(fast_settings, mailer).dispatch(booking)

    assert not outcome.success
    assert mailer.started == 2
    assert "timed out" in outcome.client.error_message


@pytest.mark.asyncio
async def test_sends_run_concurrently(settings, booking):
    mailer = SlowMailer(delay=0.2)
    loop = asyncio.get_running_loop()

    started = loop.time()
    outcome = await BookingIntake(settings, mailer).dispatch(booking)

    assert outcome.success
    assert loop.time() - started < 0.39


@pytest.mark.asyncio
async def test_unexpected_transport_exception_becomes_failure(settings, booking):
    outcome = await BookingIntake(settings, ExplodingMailer()).dispatch(booking)

    assert not outcome.success
    assert outcome.client.error_message == "provider SDK crashed"
    assert outcome.admin.error_message == "provider SDK crashed"

"""
Tests for booking notification rendering
"""

import pytest

from schemas.booking import BookingRequest
from services.notifications import BookingNotificationRenderer


@pytest.fixture(name="renderer")
def renderer_fixture(settings):
    return BookingNotificationRenderer(settings)


@pytest.fixture(name="booking")
def booking_fixture(valid_payload):
    return BookingRequest(**valid_payload)


class TestClientMessage:
    def test_addressed_to_client(self, renderer, booking):
        message = renderer.render_client_message(booking)

        assert message.to == "jane@x.com"
        assert message.reply_to is None

    def test_summarizes_booking_and_contact(self, renderer, booking):
        html = renderer.render_client_message(booking).html

        assert "Jane Doe" in html
        assert "Consult" in html
        assert "2025-01-10" in html
        assert "10:00" in html
        assert "hello@altura.example.com" in html
        assert "Altura Health Strategies" in html


class TestAdminMessage:
    def test_addressed_to_admin_with_client_reply_to(self, renderer, booking):
        message = renderer.render_admin_message(booking)

        assert message.to == "admin@altura.example.com"
        assert message.reply_to == "jane@x.com"
        assert message.subject == "New Booking: Jane Doe - Individual"

    def test_missing_optional_fields_render_placeholder(self, renderer, booking):
        html = renderer.render_admin_message(booking).html

        # phone, organization and notes are absent
        assert html.count("N/A") == 3

    def test_lists_every_field(self, renderer, valid_payload):
        booking = BookingRequest(
            **valid_payload, phone="+1 555 0100", organization="Acme", notes="Prefers mornings"
        )

        html = renderer.render_admin_message(booking).html

        for label in ["Name", "Email", "Phone", "Organization", "Service", "Date", "Time", "Notes"]:
            assert f"<strong>{label}</strong>" in html
        for value in ["+1 555 0100", "Acme", "Prefers mornings", "jane@x.com"]:
            assert value in html
        assert "N/A" not in html


def test_quotes_are_escaped(renderer, valid_payload):
    booking = BookingRequest(**{**valid_payload, "serviceType": '"><svg onload=x>'})

    client_message, admin_message = renderer.render(booking)

    for html in (client_message.html, admin_message.html):
        assert "<svg" not in html
        assert "&#34;&gt;&lt;svg onload=x&gt;" in html

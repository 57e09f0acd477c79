from __future__ import annotations

from fastapi import Request, Response

from core.config import AppSettings
from services.gatekeeper import BookingGatekeeper
from services.intake import BookingIntake


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_gatekeeper(request: Request) -> BookingGatekeeper:
    return request.app.state.gatekeeper


def get_intake(request: Request) -> BookingIntake:
    return request.app.state.intake


async def enforce_booking_gate(request: Request, response: Response) -> None:
    # async so the rate counter is updated on the event loop, never in a worker thread
    gatekeeper = get_gatekeeper(request)
    gatekeeper.check_origin(request)
    decision = gatekeeper.check_rate(gatekeeper.client_identity(request))
    response.headers["RateLimit-Limit"] = str(decision.limit)
    response.headers["RateLimit-Remaining"] = str(decision.remaining)
    response.headers["RateLimit-Reset"] = str(decision.reset_in)

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import enforce_booking_gate, get_intake
from schemas.booking import BookingRequest, BookingResponse, ErrorResponse
from services.intake import BookingIntake


router = APIRouter(tags=["booking"])
logger = logging.getLogger(__name__)

BOOKING_CONFIRMED = "Booking confirmed! Check your email for confirmation."
BOOKING_FAILED = "Failed to process booking. Please try again later."


@router.post(
    "/booking",
    response_model=BookingResponse,
    dependencies=[Depends(enforce_booking_gate)],
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def create_booking(
    payload: BookingRequest,
    intake: BookingIntake = Depends(get_intake),
) -> BookingResponse:
    logger.info(
        "booking.received",
        extra={"email": payload.email},
    )
    outcome = await intake.dispatch(payload)
    if not outcome.success:
        # Provider errors are logged by the intake; callers only get a generic message
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=BOOKING_FAILED)
    return BookingResponse(message=BOOKING_CONFIRMED, id=outcome.delivery_id, status="confirmed")

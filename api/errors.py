from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from schemas.booking import BookingRequest
from services.gatekeeper import OriginNotAllowed, RateLimitExceeded


logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many booking requests from this IP, please try again later."

# Defaults that fail validation are located by field name, not by the alias the client sends
FIELD_ALIASES = {name: field.alias or name for name, field in BookingRequest.model_fields.items()}


def _field_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    details: list[dict[str, str]] = []
    for err in errors:
        loc = [FIELD_ALIASES.get(str(part), str(part)) for part in err.get("loc", ()) if part != "body"]
        field = "body" if err.get("type") == "json_invalid" else ".".join(loc) or "body"
        cause = (err.get("ctx") or {}).get("error")
        message = str(cause) if isinstance(cause, ValueError) else err.get("msg", "Invalid value")
        details.append({"field": field, "message": message})
    return details


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _field_errors(list(exc.errors()))
    logger.info(
        "booking.validation_failed",
        extra={"path": request.url.path, "fields": [d["field"] for d in details]},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid input data", "details": details},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": RATE_LIMIT_MESSAGE, "retryAfter": exc.retry_after},
        headers={"Retry-After": str(exc.retry_after)},
    )


async def origin_exception_handler(request: Request, exc: OriginNotAllowed) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"error": "Origin not allowed"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(OriginNotAllowed, origin_exception_handler)

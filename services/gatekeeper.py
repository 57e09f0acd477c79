"""Transport-level protections applied before booking logic runs."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from limits import RateLimitItemPerSecond
from limits.storage import Storage, storage_from_string
from limits.strategies import FixedWindowRateLimiter
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.config import AppSettings


logger = logging.getLogger(__name__)

BODY_TOO_LARGE = "Request body too large"


class RateLimitExceeded(Exception):
    def __init__(self, retry_after: int) -> None:
        super().__init__(f"rate limit exceeded, retry after {retry_after}s")
        self.retry_after = retry_after


class OriginNotAllowed(Exception):
    def __init__(self, origin: str) -> None:
        super().__init__(f"origin not allowed: {origin}")
        self.origin = origin


@dataclass(frozen=True)
class RateDecision:
    limit: int
    remaining: int
    reset_in: int


class BookingGatekeeper:
    def __init__(self, settings: AppSettings, store: Storage | None = None) -> None:
        self.settings = settings
        # In-memory by default; a redis:// URI shares windows across processes
        self.store = store if store is not None else storage_from_string(settings.rate_limit_storage_uri)
        self.limiter = FixedWindowRateLimiter(self.store)
        self.booking_limit = RateLimitItemPerSecond(
            settings.rate_limit_max_requests, settings.rate_limit_window_seconds
        )

    def client_identity(self, request: Request) -> str:
        if self.settings.trust_forwarded_for:
            forwarded = request.headers.get("x-forwarded-for", "")
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop
        return request.client.host if request.client else "unknown"

    def check_origin(self, request: Request) -> None:
        origin = request.headers.get("origin")
        # Requests without an Origin header are not cross-origin browser requests
        if origin is None or self.settings.allow_all_origins:
            return
        if origin not in self.settings.allowed_origin_list:
            logger.warning("booking.origin_rejected", extra={"origin": origin})
            raise OriginNotAllowed(origin)

    def check_rate(self, identity: str) -> RateDecision:
        allowed = self.limiter.hit(self.booking_limit, "booking", identity)
        stats = self.limiter.get_window_stats(self.booking_limit, "booking", identity)
        reset_in = max(1, math.ceil(stats.reset_time - time.time()))
        if not allowed:
            logger.warning("booking.rate_limited", extra={"client": identity, "retry_after": reset_in})
            raise RateLimitExceeded(retry_after=reset_in)
        return RateDecision(limit=self.booking_limit.amount, remaining=stats.remaining, reset_in=reset_in)

    def reset(self) -> None:
        self.store.reset()


class BodySizeLimitMiddleware:
    """Rejects request bodies larger than ``max_bytes`` with 413.

    A declared ``Content-Length`` is checked up front. Otherwise the body is
    counted as it is received and the read is aborted once the ceiling is
    passed, so at most one chunk beyond the limit is ever held.
    """

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in {"POST", "PUT", "PATCH"}:
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        declared = Headers(scope=scope).get("content-length")
        if declared is not None:
            try:
                too_large = int(declared) > self.max_bytes
            except ValueError:
                response = JSONResponse(status_code=400, content={"error": "Invalid Content-Length header"})
                await response(scope, receive, send)
                return
            if too_large:
                logger.warning("request.body_too_large", extra={"path": path, "bytes": declared})
                await JSONResponse(status_code=413, content={"error": BODY_TOO_LARGE})(scope, receive, send)
                return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    logger.warning("request.body_too_large", extra={"path": path, "bytes": received})
                    # HTTPException passes through FastAPI's body parsing and reaches the 413 handler
                    raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=BODY_TOO_LARGE)
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except HTTPException as exc:
            if response_started or exc.status_code != status.HTTP_413_REQUEST_ENTITY_TOO_LARGE:
                raise
            await JSONResponse(status_code=exc.status_code, content={"error": exc.detail})(scope, receive, send)


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

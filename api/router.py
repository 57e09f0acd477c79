from __future__ import annotations

from fastapi import APIRouter

from api.endpoints import booking as booking_endpoints
from api.endpoints import health as health_endpoints


api_router = APIRouter()

api_router.include_router(booking_endpoints.router)
api_router.include_router(health_endpoints.router)

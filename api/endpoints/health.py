from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from api.deps import get_app_settings
from core.config import AppSettings
from schemas.booking import HealthResponse


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(settings: AppSettings = Depends(get_app_settings)) -> HealthResponse:
    return HealthResponse(
        status="Server is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
        port=settings.port,
        environment=settings.environment,
    )

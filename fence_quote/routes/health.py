# fence_quote/routes/health.py
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from fence_quote import __version__
from fence_quote.core.config import Settings, get_settings
from fence_quote.services.normalization import is_valid_email

router = APIRouter(tags=["health"])

_started_at = time.monotonic()


class HealthCheckResponse(BaseModel):
    status: str
    service: str
    environment: str
    version: str
    timestamp: str
    uptime: float
    checks: Dict[str, Dict[str, str]]


def check_email(settings: Settings) -> Dict[str, str]:
    """Report whether a sending identity is configured, without revealing it."""
    if not settings.email_configured:
        return {"status": "unconfigured"}
    if not is_valid_email(settings.from_email):
        return {"status": "misconfigured"}
    return {"status": "configured", "provider": "sendgrid"}


@router.get("/health", response_model=HealthCheckResponse)
async def health(settings: Settings = Depends(get_settings)) -> HealthCheckResponse:
    email = check_email(settings)
    return HealthCheckResponse(
        status="healthy" if email["status"] == "configured" else "degraded",
        service="fence-quote",
        environment=settings.environment,
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime=round(time.monotonic() - _started_at, 3),
        checks={"email": email},
    )

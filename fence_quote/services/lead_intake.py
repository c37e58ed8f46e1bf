# fence_quote/services/lead_intake.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlsplit

from fastapi import Depends

from fence_quote.core.config import Settings, get_settings
from fence_quote.core.errors import (
    IntakeFailure,
    client_error,
    method_not_allowed,
    rate_limited,
    server_error,
)
from fence_quote.core.logging import get_structlog_logger
from fence_quote.schemas.lead import LeadSubmission
from fence_quote.services.email_gateway import SendGridGateway, get_email_gateway
from fence_quote.services.normalization import is_valid_email, normalize_lead
from fence_quote.services.notifications import (
    CUSTOMER_SUBJECT,
    build_customer_html,
    build_customer_text,
    build_owner_html,
    build_owner_text,
    owner_subject,
)
from fence_quote.services.rate_limit import FixedWindowRateLimiter, get_rate_limiter
from fence_quote.services.validation import SPAM_MESSAGE, validate_lead

logger = get_structlog_logger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class IntakeRequest:
    method: str
    origin: Optional[str]
    client_id: str
    body: Any


@dataclass(frozen=True)
class IntakeResponse:
    status_code: int
    body: Optional[Dict[str, Any]]

    @classmethod
    def from_failure(cls, failure: IntakeFailure) -> "IntakeResponse":
        return cls(status_code=failure.status_code, body=failure.to_body())


def normalize_origin(value: Optional[str]) -> str:
    """Reduce an origin or URL to ``scheme://host[:port]`` in lower case, or "" if unusable."""
    value = (value or "").strip()
    if not value:
        return ""
    try:
        parts = urlsplit(value)
        port = parts.port
    except ValueError:
        return ""

    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if not scheme or not host:
        return ""
    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"
    return f"{scheme}://{host}"


def parse_body(raw: Any) -> Optional[Dict[str, Any]]:
    """Accept a mapping as-is or parse one JSON object from text. None when unusable."""
    if isinstance(raw, Mapping):
        return dict(raw)
    if not isinstance(raw, (str, bytes, bytearray)) or not raw.strip():
        return None
    try:
        parsed = json.loads(raw)
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


class LeadIntakeHandler:
    """
    Lead submission pipeline:
    1. Method gate
    2. Origin allow-list
    3. Per-client rate limit
    4. Body parsing, normalization and validation
    5. Sending identity check
    6. Owner notification, then customer notification
    """

    def __init__(
        self,
        *,
        settings: Settings,
        limiter: FixedWindowRateLimiter,
        gateway: SendGridGateway,
    ) -> None:
        self.settings = settings
        self.limiter = limiter
        self.gateway = gateway

    async def handle(self, request: IntakeRequest) -> IntakeResponse:
        method = request.method.upper()
        if method == "OPTIONS":
            return IntakeResponse(status_code=204, body=None)
        if method != "POST":
            return self._fail(method_not_allowed())

        if not self.is_allowed_origin(request.origin):
            return self._fail(client_error("Origin not allowed"), origin=request.origin)

        if not self.limiter.admit(request.client_id):
            logger.warning("rate_limit.exceeded", client_id=request.client_id[:50])
            return self._fail(rate_limited())

        payload = parse_body(request.body)
        if payload is None:
            return self._fail(client_error("Invalid JSON body"))

        lead = normalize_lead(payload)
        validation_error = validate_lead(lead)
        if validation_error:
            if validation_error == SPAM_MESSAGE:
                logger.info("lead.spam_blocked", client_id=request.client_id[:50])
            return self._fail(client_error(validation_error))

        failure = self.check_delivery_config()
        if failure:
            return self._fail(failure)

        failure = await self.notify_owner(lead)
        if failure:
            return self._fail(failure, stage="owner_notification")

        failure = await self.notify_customer(lead)
        if failure:
            return self._fail(failure, stage="customer_notification")

        logger.info(
            "lead.accepted",
            client=lead.client,
            owner=lead.pushover_email,
            total_linear_feet=lead.total_linear_feet,
            segments=len(lead.segments),
        )
        return IntakeResponse(status_code=200, body={"ok": True})

    def allowed_origins(self) -> List[str]:
        normalized = (normalize_origin(item) for item in self.settings.origins())
        return [origin for origin in normalized if origin]

    def is_allowed_origin(self, origin: Optional[str]) -> bool:
        if not self.settings.allowed_origins.strip():
            return True
        candidate = normalize_origin(origin)
        if not candidate:
            return False
        return candidate in self.allowed_origins()

    def check_delivery_config(self) -> Optional[IntakeFailure]:
        if not self.settings.email_configured:
            return server_error("Email service is not configured.")
        if not is_valid_email(self.settings.from_email):
            return server_error("Sender email is invalid.")
        return None

    async def notify_owner(self, lead: LeadSubmission) -> Optional[IntakeFailure]:
        return await self.gateway.send(
            to_email=lead.pushover_email,
            subject=owner_subject(lead),
            text=build_owner_text(lead),
            html=build_owner_html(lead),
            reply_to=lead.email,
        )

    async def notify_customer(self, lead: LeadSubmission) -> Optional[IntakeFailure]:
        return await self.gateway.send(
            to_email=lead.email,
            subject=CUSTOMER_SUBJECT,
            text=build_customer_text(lead),
            html=build_customer_html(lead),
            reply_to=lead.pushover_email,
        )

    def _fail(self, failure: IntakeFailure, **context: Any) -> IntakeResponse:
        if failure.is_server_error:
            logger.error(
                "lead.failed",
                status_code=failure.status_code,
                error=failure.message,
                detail=failure.detail,
                **context,
            )
        else:
            logger.warning(
                "lead.rejected",
                status_code=failure.status_code,
                error=failure.message,
                **context,
            )
        return IntakeResponse.from_failure(failure)


def get_lead_intake(
    settings: Settings = Depends(get_settings),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    gateway: SendGridGateway = Depends(get_email_gateway),
) -> LeadIntakeHandler:
    return LeadIntakeHandler(settings=settings, limiter=limiter, gateway=gateway)

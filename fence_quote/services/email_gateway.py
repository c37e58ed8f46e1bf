# fence_quote/services/email_gateway.py
from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, Optional

import aiohttp
from fastapi import Depends

from fence_quote.core.config import Settings, get_settings
from fence_quote.core.errors import IntakeFailure, server_error
from fence_quote.core.logging import get_structlog_logger
from fence_quote.services.normalization import is_valid_email

logger = get_structlog_logger(__name__)

DELIVERY_FAILED = "Email delivery failed."

# Public messages for SendGrid error statuses. Anything else is DELIVERY_FAILED.
STATUS_MESSAGES = {
    400: "SendGrid rejected the email request. Check sender/recipient emails.",
    401: "SendGrid API key is invalid.",
    403: "Sender email is not verified in SendGrid.",
}

PROVIDER_DETAIL_LIMIT = 400


def extract_provider_message(raw: str) -> str:
    """First ``errors[].message`` of a SendGrid error body, else the raw body, truncated."""
    if not raw:
        return ""
    try:
        parsed = json.loads(raw)
    except ValueError:
        return raw[:PROVIDER_DETAIL_LIMIT]

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            message = errors[0].get("message")
            if message:
                return str(message)[:PROVIDER_DETAIL_LIMIT]
    return raw[:PROVIDER_DETAIL_LIMIT]


class SendGridGateway:
    """Sends one message per call through the SendGrid v3 mail/send endpoint."""

    def __init__(
        self,
        *,
        api_key: str,
        from_email: str,
        api_url: str = "https://api.sendgrid.com/v3/mail/send",
        timeout: Optional[float] = None,
        session_factory: Callable[[], aiohttp.ClientSession] = aiohttp.ClientSession,
    ) -> None:
        self.api_key = api_key
        self.from_email = from_email
        self.api_url = api_url
        self.timeout = timeout
        self._session_factory = session_factory

    def build_payload(
        self,
        *,
        to_email: str,
        subject: str,
        text: str,
        html: str,
        reply_to: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "personalizations": [{"to": [{"email": to_email}], "subject": subject}],
            "from": {"email": self.from_email},
            "content": [
                {"type": "text/plain", "value": text},
                {"type": "text/html", "value": html},
            ],
        }
        if reply_to and is_valid_email(reply_to):
            payload["reply_to"] = {"email": reply_to}
        return payload

    async def send(
        self,
        *,
        to_email: str,
        subject: str,
        text: str,
        html: str,
        reply_to: Optional[str] = None,
    ) -> Optional[IntakeFailure]:
        """
        Send a single message.
        Returns None on success, or the failure to report to the caller.
        """
        payload = self.build_payload(
            to_email=to_email,
            subject=subject,
            text=text,
            html=html,
            reply_to=reply_to,
        )
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        request_kwargs: Dict[str, Any] = {"json": payload, "headers": headers}
        if self.timeout:
            request_kwargs["timeout"] = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with self._session_factory() as session:
                async with session.post(self.api_url, **request_kwargs) as response:
                    status = response.status
                    if 200 <= status < 300:
                        return None
                    raw = await response.text()
        except asyncio.TimeoutError:
            return server_error(DELIVERY_FAILED, detail="request timeout")
        except aiohttp.ClientError as e:
            return server_error(DELIVERY_FAILED, detail=f"client error: {str(e)[:200]}")

        provider_detail = extract_provider_message(raw)
        logger.warning("email.provider_rejected", status_code=status)
        return server_error(
            STATUS_MESSAGES.get(status, DELIVERY_FAILED),
            detail=f"status={status}; details={provider_detail}",
        )


def get_email_gateway(settings: Settings = Depends(get_settings)) -> SendGridGateway:
    """FastAPI dependency building the gateway from the configured sending identity."""
    return SendGridGateway(
        api_key=settings.sendgrid_api_key,
        from_email=settings.from_email,
        api_url=settings.sendgrid_api_url,
        timeout=settings.sendgrid_timeout_seconds,
    )

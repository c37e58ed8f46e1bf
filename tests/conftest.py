import os

os.environ.setdefault("ENVIRONMENT", "testing")

from typing import List, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from fence_quote.core.config import Settings, get_settings  # noqa: E402
from fence_quote.core.errors import IntakeFailure  # noqa: E402
from fence_quote.main import app  # noqa: E402
from fence_quote.services.email_gateway import get_email_gateway  # noqa: E402
from fence_quote.services.rate_limit import FixedWindowRateLimiter, get_rate_limiter  # noqa: E402

VALID_LEAD = {
    "fullName": "Jane Doe",
    "phone": "555-0100",
    "email": "jane@example.com",
    "address": "1 Main St",
    "pushover_email": "owner@example.com",
    "totalLinearFeet": 120,
    "estimatedMin": 3000,
    "estimatedMax": 4200,
    "website": "",
}


class RecordingGateway:
    """Stands in for SendGridGateway; records every message it is asked to send."""

    def __init__(self, failures: Optional[List[Optional[IntakeFailure]]] = None):
        self.sent: List[dict] = []
        self._failures = list(failures or [])

    async def send(self, *, to_email, subject, text, html, reply_to=None):
        self.sent.append(
            {
                "to_email": to_email,
                "subject": subject,
                "text": text,
                "html": html,
                "reply_to": reply_to,
            }
        )
        if self._failures:
            return self._failures.pop(0)
        return None


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, status: int, body: str = ""):
        self.status = status
        self._body = body

    async def text(self) -> str:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Minimal aiohttp.ClientSession replacement that replays queued responses."""

    def __init__(self, responses: Optional[List[FakeResponse]] = None, error: Optional[BaseException] = None):
        self.responses = list(responses or [])
        self.error = error
        self.calls: List[tuple] = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def app_settings():
    return Settings(
        environment="testing",
        sendgrid_api_key="SG.test-key",
        from_email="quotes@fence.example",
        allowed_origins="",
        lead_rate_limit_max=8,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(app_settings, clock):
    return FixedWindowRateLimiter(
        max_requests=app_settings.lead_rate_limit_max,
        window_seconds=600,
        clock=clock,
    )


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def client(app_settings, limiter, gateway):
    app.dependency_overrides[get_settings] = lambda: app_settings
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_email_gateway] = lambda: gateway
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()

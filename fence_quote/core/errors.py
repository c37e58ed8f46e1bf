# fence_quote/core/errors.py
"""
Public failure results for the lead pipeline.

Stages return an ``IntakeFailure`` instead of raising. ``message`` is safe to
show to the caller; ``detail`` is only ever written to the server log.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class IntakeFailure:
    status_code: int
    message: str
    detail: str = ""

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500

    def to_body(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.message}


def client_error(message: str, detail: str = "") -> IntakeFailure:
    """Caller-induced failure (bad origin, body or field)."""
    return IntakeFailure(status_code=400, message=message, detail=detail)


def method_not_allowed() -> IntakeFailure:
    return IntakeFailure(status_code=405, message="Method not allowed")


def rate_limited() -> IntakeFailure:
    return IntakeFailure(status_code=429, message="Too many requests. Try again later.")


def server_error(message: str = "Internal server error", detail: str = "") -> IntakeFailure:
    """Configuration or provider fault."""
    return IntakeFailure(status_code=500, message=message, detail=detail)

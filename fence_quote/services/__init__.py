# fence_quote/services/__init__.py
"""
Business logic services for lead intake and estimates.
"""

from fence_quote.services.email_gateway import SendGridGateway, get_email_gateway
from fence_quote.services.estimate import build_estimate, estimate_range, total_length_feet
from fence_quote.services.lead_intake import (
    IntakeRequest,
    IntakeResponse,
    LeadIntakeHandler,
    get_lead_intake,
)
from fence_quote.services.normalization import normalize_lead
from fence_quote.services.rate_limit import FixedWindowRateLimiter, get_rate_limiter
from fence_quote.services.validation import validate_lead

__all__ = [
    # Email
    "SendGridGateway",
    "get_email_gateway",
    # Estimates
    "build_estimate",
    "estimate_range",
    "total_length_feet",
    # Lead intake
    "IntakeRequest",
    "IntakeResponse",
    "LeadIntakeHandler",
    "get_lead_intake",
    "normalize_lead",
    "validate_lead",
    # Rate limiting
    "FixedWindowRateLimiter",
    "get_rate_limiter",
]

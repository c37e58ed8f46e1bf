"""Ordered validation checks for a normalized lead."""
from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from fence_quote.schemas.lead import LeadSubmission
from fence_quote.services.normalization import is_valid_email

SPAM_MESSAGE = "Spam blocked."

# Evaluated in order; the first failing check decides the message.
LEAD_CHECKS: List[Tuple[Callable[[LeadSubmission], bool], str]] = [
    (lambda lead: not lead.website, SPAM_MESSAGE),
    (lambda lead: bool(lead.full_name), "Full name is required."),
    (lambda lead: bool(lead.phone), "Phone is required."),
    (lambda lead: is_valid_email(lead.email), "Valid customer email is required."),
    (lambda lead: bool(lead.address), "Address is required."),
    (lambda lead: is_valid_email(lead.pushover_email), "Valid owner email is required."),
    (lambda lead: lead.total_linear_feet > 0, "totalLinearFeet must be greater than 0."),
]


def validate_lead(lead: LeadSubmission) -> Optional[str]:
    """Return the message of the first failed check, or None when the lead is acceptable."""
    for check, message in LEAD_CHECKS:
        if not check(lead):
            return message
    return None

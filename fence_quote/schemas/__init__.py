# fence_quote/schemas/__init__.py
"""
Pydantic schemas for lead submissions and estimate requests.
"""

from fence_quote.schemas.estimate import EstimateRequest, EstimateResponse
from fence_quote.schemas.lead import GeoPoint, LeadSubmission

__all__ = [
    "EstimateRequest",
    "EstimateResponse",
    "GeoPoint",
    "LeadSubmission",
]

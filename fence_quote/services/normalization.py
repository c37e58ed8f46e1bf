# fence_quote/services/normalization.py
"""
Coercion of an untrusted lead payload into a ``LeadSubmission``.

Normalization never rejects. Text is cleaned and truncated to its cap, and
numbers that are missing, unparseable, non-finite or on the wrong side of
their sign constraint become ``0``. Rejection is the job of
``fence_quote.services.validation``.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from fence_quote.schemas.lead import GeoPoint, LeadSubmission

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_ANGLE_BRACKETS = re.compile(r"[<>]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


@dataclass(frozen=True)
class FieldLimits:
    client: int = 64
    company_name: int = 120
    email: int = 160
    address: int = 220
    fence_type: int = 64
    full_name: int = 120
    phone: int = 40
    created_at: int = 80
    page_url: int = 300
    website: int = 200
    max_segments: int = 40
    max_points_per_segment: int = 200
    coordinate_places: int = 7


def clean_text(value: Any, max_len: int) -> str:
    if value is None:
        return ""
    text = _ANGLE_BRACKETS.sub("", str(value))
    text = _CONTROL_CHARS.sub(" ", text).strip()
    return text[:max_len]


def is_valid_email(value: Optional[str]) -> bool:
    if not value:
        return False
    return bool(_EMAIL_PATTERN.match(str(value).strip()))


def to_number(value: Any) -> float:
    """Parse a loosely typed number. Returns NaN when nothing usable is found."""
    if value is None:
        return 0.0
    try:
        if isinstance(value, (bool, int, float)):
            return float(value)
        if isinstance(value, str):
            text = value.strip()
            return float(text) if text else 0.0
    except (ValueError, OverflowError):
        return math.nan
    return math.nan


def to_positive_number(value: Any) -> float:
    n = to_number(value)
    return n if math.isfinite(n) and n > 0 else 0.0


def to_non_negative_number(value: Any) -> float:
    n = to_number(value)
    return n if math.isfinite(n) and n >= 0 else 0.0


def to_non_negative_int(value: Any) -> int:
    n = to_number(value)
    if not math.isfinite(n):
        return 0
    n = math.floor(n)
    return n if n >= 0 else 0


def to_coordinate(value: Any, places: int = 7) -> float:
    n = to_number(value)
    return round(n, places) if math.isfinite(n) else 0.0


def _pick(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


class LeadNormalizer:
    def __init__(self, limits: Optional[FieldLimits] = None):
        self.limits = limits or FieldLimits()

    def clean_email(self, value: Any) -> str:
        return clean_text(value, self.limits.email).lower()

    def normalize_segments(self, value: Any) -> List[List[GeoPoint]]:
        if not isinstance(value, (list, tuple)):
            return []

        places = self.limits.coordinate_places
        segments = []
        for segment in value[: self.limits.max_segments]:
            if not isinstance(segment, (list, tuple)):
                segments.append([])
                continue
            points = []
            for point in segment[: self.limits.max_points_per_segment]:
                if not isinstance(point, Mapping):
                    point = {}
                points.append(
                    GeoPoint(
                        lat=to_coordinate(point.get("lat"), places),
                        lng=to_coordinate(point.get("lng"), places),
                    )
                )
            segments.append(points)
        return segments

    def normalize(self, payload: Mapping[str, Any]) -> LeadSubmission:
        limits = self.limits
        return LeadSubmission(
            client=clean_text(payload.get("client"), limits.client),
            company_name=clean_text(payload.get("companyName"), limits.company_name),
            pushover_email=self.clean_email(_pick(payload, "pushover_email", "pushoverEmail")),
            address=clean_text(payload.get("address"), limits.address),
            fence_type=clean_text(payload.get("fenceType"), limits.fence_type),
            walk_gates_qty=to_non_negative_int(payload.get("walkGatesQty")),
            double_gates_qty=to_non_negative_int(payload.get("doubleGatesQty")),
            remove_old_fence=bool(payload.get("removeOldFence")),
            total_linear_feet=to_positive_number(payload.get("totalLinearFeet")),
            segments_count=to_non_negative_int(payload.get("segmentsCount")),
            estimated_min=to_non_negative_number(payload.get("estimatedMin")),
            estimated_max=to_non_negative_number(payload.get("estimatedMax")),
            segments=self.normalize_segments(payload.get("segments")),
            full_name=clean_text(payload.get("fullName"), limits.full_name),
            phone=clean_text(payload.get("phone"), limits.phone),
            email=self.clean_email(payload.get("email")),
            created_at=clean_text(_pick(payload, "created_at", "createdAt"), limits.created_at),
            page_url=clean_text(_pick(payload, "page_url", "pageUrl"), limits.page_url),
            website=clean_text(payload.get("website"), limits.website),
        )


# Global instance with production limits
normalizer = LeadNormalizer()


def normalize_lead(payload: Mapping[str, Any]) -> LeadSubmission:
    """Production alias for lead normalization."""
    return normalizer.normalize(payload)

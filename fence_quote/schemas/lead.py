# fence_quote/schemas/lead.py
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(default=0.0, allow_inf_nan=False)
    lng: float = Field(default=0.0, allow_inf_nan=False)


class LeadSubmission(BaseModel):
    """A lead after normalization. Every field already has its final type."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Tenant / owner routing
    client: str = ""
    company_name: str = Field(default="", alias="companyName")
    pushover_email: str = Field(default="", alias="pushoverEmail")

    # Measurement and pricing
    address: str = ""
    fence_type: str = Field(default="", alias="fenceType")
    walk_gates_qty: int = Field(default=0, ge=0, alias="walkGatesQty")
    double_gates_qty: int = Field(default=0, ge=0, alias="doubleGatesQty")
    remove_old_fence: bool = Field(default=False, alias="removeOldFence")
    total_linear_feet: float = Field(default=0.0, ge=0, alias="totalLinearFeet")
    segments_count: int = Field(default=0, ge=0, alias="segmentsCount")
    estimated_min: float = Field(default=0.0, ge=0, alias="estimatedMin")
    estimated_max: float = Field(default=0.0, ge=0, alias="estimatedMax")
    segments: List[List[GeoPoint]] = Field(default_factory=list)

    # Contact
    full_name: str = Field(default="", alias="fullName")
    phone: str = ""
    email: str = ""

    # Provenance / anti-abuse
    created_at: str = Field(default="", alias="createdAt")
    page_url: str = Field(default="", alias="pageUrl")
    website: str = ""

    @property
    def company_label(self) -> str:
        return self.company_name or self.client or "Fence Widget"

    def segments_as_lists(self) -> List[List[dict]]:
        return [[point.model_dump() for point in segment] for segment in self.segments]

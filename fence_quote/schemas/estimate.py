# fence_quote/schemas/estimate.py
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fence_quote.schemas.lead import GeoPoint

_MAX_FEET = 1_000_000.0
_MAX_PRICE = 100_000.0
_MAX_GATES = 1_000


class EstimateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    segments: List[List[GeoPoint]] = Field(default_factory=list, max_length=40)
    linear_feet: float = Field(default=0.0, ge=0, le=_MAX_FEET, allow_inf_nan=False, alias="linearFeet")

    # Per-foot price range for the chosen fence type
    price_per_ft_low: float = Field(ge=0, le=_MAX_PRICE, allow_inf_nan=False, alias="pricePerFtLow")
    price_per_ft_high: float = Field(ge=0, le=_MAX_PRICE, allow_inf_nan=False, alias="pricePerFtHigh")

    walk_gates_qty: int = Field(default=0, ge=0, le=_MAX_GATES, alias="walkGatesQty")
    double_gates_qty: int = Field(default=0, ge=0, le=_MAX_GATES, alias="doubleGatesQty")
    walk_gate_cost: float = Field(default=0.0, ge=0, le=_MAX_PRICE, allow_inf_nan=False, alias="walkGateCost")
    double_gate_cost: float = Field(default=0.0, ge=0, le=_MAX_PRICE, allow_inf_nan=False, alias="doubleGateCost")
    remove_old_fence: bool = Field(default=False, alias="removeOldFence")
    removal_per_ft: float = Field(default=0.0, ge=0, le=_MAX_PRICE, allow_inf_nan=False, alias="removalPerFt")

    @model_validator(mode="after")
    def check_segment_size(self) -> "EstimateRequest":
        for segment in self.segments:
            if len(segment) > 200:
                raise ValueError("a segment may hold at most 200 points")
        return self


class EstimateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    linear_feet: float = Field(alias="linearFeet")
    segments_count: int = Field(alias="segmentsCount")
    estimated_min: float = Field(alias="estimatedMin")
    estimated_max: float = Field(alias="estimatedMax")

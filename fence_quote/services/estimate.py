# fence_quote/services/estimate.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from fence_quote.schemas.estimate import EstimateRequest, EstimateResponse
from fence_quote.schemas.lead import GeoPoint

# Spherical earth radius used by web map SDKs, in meters
EARTH_RADIUS_M = 6378137.0
METERS_PER_FOOT = 0.3048


@dataclass(frozen=True)
class PriceRange:
    low: float
    high: float


def haversine_meters(a: GeoPoint, b: GeoPoint) -> float:
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def polyline_length_feet(points: Sequence[GeoPoint]) -> float:
    meters = sum(haversine_meters(a, b) for a, b in zip(points, points[1:]))
    return meters / METERS_PER_FOOT


def total_length_feet(segments: Iterable[Sequence[GeoPoint]]) -> float:
    return sum(polyline_length_feet(segment) for segment in segments)


def estimate_range(
    linear_feet: float,
    *,
    price_low: float,
    price_high: float,
    walk_gates: int = 0,
    double_gates: int = 0,
    walk_gate_cost: float = 0.0,
    double_gate_cost: float = 0.0,
    remove_old_fence: bool = False,
    removal_per_ft: float = 0.0,
) -> PriceRange:
    """Per-foot price plus gate and removal add-ons, in whole dollars."""
    add_ons = walk_gates * walk_gate_cost + double_gates * double_gate_cost
    if remove_old_fence:
        add_ons += linear_feet * removal_per_ft
    return PriceRange(
        low=float(round(linear_feet * price_low + add_ons)),
        high=float(round(linear_feet * price_high + add_ons)),
    )


def build_estimate(request: EstimateRequest) -> EstimateResponse:
    drawn = [segment for segment in request.segments if len(segment) >= 2]
    measured = total_length_feet(drawn)
    linear_feet = measured if measured > 0 else request.linear_feet

    prices = estimate_range(
        linear_feet,
        price_low=request.price_per_ft_low,
        price_high=request.price_per_ft_high,
        walk_gates=request.walk_gates_qty,
        double_gates=request.double_gates_qty,
        walk_gate_cost=request.walk_gate_cost,
        double_gate_cost=request.double_gate_cost,
        remove_old_fence=request.remove_old_fence,
        removal_per_ft=request.removal_per_ft,
    )
    return EstimateResponse(
        linear_feet=round(linear_feet, 1),
        segments_count=len(drawn),
        estimated_min=prices.low,
        estimated_max=prices.high,
    )

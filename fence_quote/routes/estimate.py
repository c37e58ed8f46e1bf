# fence_quote/routes/estimate.py
from __future__ import annotations

from fastapi import APIRouter

from fence_quote.core.logging import get_structlog_logger
from fence_quote.schemas.estimate import EstimateRequest, EstimateResponse
from fence_quote.services.estimate import build_estimate

logger = get_structlog_logger(__name__)

router = APIRouter()


@router.post(
    "/estimate",
    response_model=EstimateResponse,
    summary="Price a fence from drawn segments or manual footage",
)
async def create_estimate(payload: EstimateRequest) -> EstimateResponse:
    estimate = build_estimate(payload)
    logger.info(
        "estimate.computed",
        linear_feet=estimate.linear_feet,
        segments=estimate.segments_count,
    )
    return estimate

# fence_quote/routes/lead.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from fence_quote.services.lead_intake import IntakeRequest, LeadIntakeHandler, get_lead_intake
from fence_quote.services.rate_limit import get_client_id

router = APIRouter()

# Every method is routed here so that the intake pipeline answers with its own
# {"ok": false} envelope instead of the framework's 405.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route(
    "/lead",
    methods=_ALL_METHODS,
    summary="Submit a fence quote lead",
)
async def submit_lead(
    request: Request,
    intake: LeadIntakeHandler = Depends(get_lead_intake),
) -> Response:
    body = await request.body() if request.method == "POST" else b""
    result = await intake.handle(
        IntakeRequest(
            method=request.method,
            origin=request.headers.get("origin"),
            client_id=get_client_id(request),
            body=body,
        )
    )
    if result.body is None:
        return Response(status_code=result.status_code)
    return JSONResponse(status_code=result.status_code, content=result.body)

# fence_quote/middleware/cors.py
from __future__ import annotations

from typing import Iterable

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

_FORWARDED_PREFIXES = (b"access-control-", b"vary")


class IntakeCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that lets the intake route answer its own OPTIONS.

    A browser preflight to an intake path still gets the CORS grant headers,
    but the status and body come from the route (204, empty).
    """

    def __init__(self, app: ASGIApp, intake_paths: Iterable[str] = (), **kwargs) -> None:
        super().__init__(app, **kwargs)
        self.intake_paths = frozenset(intake_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] != "http"
            or scope["method"] != "OPTIONS"
            or scope["path"] not in self.intake_paths
        ):
            await super().__call__(scope, receive, send)
            return

        headers = Headers(scope=scope)
        if "origin" not in headers or "access-control-request-method" not in headers:
            await self.app(scope, receive, send)
            return

        preflight = self.preflight_response(request_headers=headers)
        if preflight.status_code != 200:
            # Rejected preflight: no grant headers, the browser blocks the POST
            await self.app(scope, receive, send)
            return

        grant = [
            (key, value)
            for key, value in preflight.raw_headers
            if key.startswith(_FORWARDED_PREFIXES)
        ]

        async def send_with_grant(message: Message) -> None:
            if message["type"] == "http.response.start":
                message = dict(message)
                message["headers"] = list(message.get("headers", [])) + grant
            await send(message)

        await self.app(scope, receive, send_with_grant)

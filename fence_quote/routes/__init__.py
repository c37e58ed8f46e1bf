# fence_quote/routes/__init__.py
"""
API route handlers.
"""

from fence_quote.routes.estimate import router as estimate_router
from fence_quote.routes.health import router as health_router
from fence_quote.routes.lead import router as lead_router

__all__ = [
    "estimate_router",
    "health_router",
    "lead_router",
]

# fence_quote/core/__init__.py
"""
Core package for configuration, logging, and shared result types.
"""

from fence_quote.core.config import Settings, get_settings, settings
from fence_quote.core.errors import IntakeFailure
from fence_quote.core.logging import configure_structlog, get_structlog_logger

__all__ = [
    "IntakeFailure",
    "Settings",
    "settings",
    "get_settings",
    "configure_structlog",
    "get_structlog_logger",
]

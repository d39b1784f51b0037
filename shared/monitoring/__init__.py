"""
Monitoring Module

Structured logging with request context for the watchlist services.
"""

from .structured_logger import (
    setup_service_logger,
    set_request_context,
    clear_request_context,
    log_business_event,
    log_error,
)

__all__ = [
    "setup_service_logger",
    "set_request_context",
    "clear_request_context",
    "log_business_event",
    "log_error",
]

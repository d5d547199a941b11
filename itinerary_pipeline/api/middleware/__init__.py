"""API middleware components."""

from itinerary_pipeline.api.middleware.error_handler import error_handler_middleware
from itinerary_pipeline.api.middleware.logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
    "error_handler_middleware",
]

"""API route handlers."""

from itinerary_pipeline.api.openapi.routes import health, jobs

__all__ = [
    "health",
    "jobs",
]

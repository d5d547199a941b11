"""API layer - REST endpoints."""

from itinerary_pipeline.api.main import app, create_app

__all__ = [
    "app",
    "create_app",
]

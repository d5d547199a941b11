"""Data transfer objects for application layer."""

from itinerary_pipeline.application.dtos.extraction import (
    ProcessJobAccepted,
    ProcessJobBody,
    ProcessJobRequest,
    ProcessJobResult,
)

__all__ = [
    "ProcessJobRequest",
    "ProcessJobResult",
    "ProcessJobBody",
    "ProcessJobAccepted",
]

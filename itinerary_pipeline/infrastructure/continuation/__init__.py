"""Self re-invocation of the pipeline."""

from itinerary_pipeline.infrastructure.continuation.base import (
    ContinuationTriggerBase,
)
from itinerary_pipeline.infrastructure.continuation.http_trigger import (
    HttpContinuationTrigger,
)
from itinerary_pipeline.infrastructure.continuation.local_trigger import (
    ContinuationHandler,
    LocalContinuationTrigger,
)

__all__ = [
    # Base classes
    "ContinuationTriggerBase",
    # Implementations
    "HttpContinuationTrigger",
    "LocalContinuationTrigger",
    "ContinuationHandler",
]

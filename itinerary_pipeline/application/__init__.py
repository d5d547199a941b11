"""Application layer - use cases and orchestration.

This layer contains:
- Services: the extraction pipeline and its steps
- DTOs: invocation requests and results
"""

from itinerary_pipeline.application.dtos import (
    ProcessJobAccepted,
    ProcessJobBody,
    ProcessJobRequest,
    ProcessJobResult,
)
from itinerary_pipeline.application.services import (
    ExtractionService,
    JobStore,
    PersistenceFinalizer,
    plan_chunks,
)

__all__ = [
    # DTOs
    "ProcessJobRequest",
    "ProcessJobResult",
    "ProcessJobBody",
    "ProcessJobAccepted",
    # Services
    "ExtractionService",
    "JobStore",
    "PersistenceFinalizer",
    "plan_chunks",
]

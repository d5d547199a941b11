"""Application services - pipeline orchestration and its steps."""

from itinerary_pipeline.application.services.chunk_planner import plan_chunks
from itinerary_pipeline.application.services.extraction import ExtractionService
from itinerary_pipeline.application.services.finalizer import PersistenceFinalizer
from itinerary_pipeline.application.services.job_store import JobStore
from itinerary_pipeline.application.services.place_validation import (
    merge_chunk_results,
    normalize_category,
    normalize_places,
    shift_timeline,
)

__all__ = [
    # Orchestration
    "ExtractionService",
    # Steps
    "plan_chunks",
    "JobStore",
    "PersistenceFinalizer",
    # Validation
    "shift_timeline",
    "merge_chunk_results",
    "normalize_category",
    "normalize_places",
]

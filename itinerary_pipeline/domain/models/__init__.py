"""Domain models."""

from itinerary_pipeline.domain.models.chunk import ChunkWindow
from itinerary_pipeline.domain.models.job import (
    CLAIMABLE_STATUSES,
    Checkpoint,
    ChunkResult,
    Job,
    JobStage,
    JobStatus,
)
from itinerary_pipeline.domain.models.place import (
    ExtractedPlace,
    PlaceCategory,
    PlaceDraft,
    PlaceItem,
)

__all__ = [
    # Job
    "Job",
    "JobStatus",
    "JobStage",
    "CLAIMABLE_STATUSES",
    "Checkpoint",
    "ChunkResult",
    # Chunk
    "ChunkWindow",
    # Place
    "ExtractedPlace",
    "PlaceCategory",
    "PlaceDraft",
    "PlaceItem",
]

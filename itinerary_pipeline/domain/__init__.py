"""Domain layer - business models and logic."""

from itinerary_pipeline.domain.exceptions import (
    CheckpointCorruptedException,
    DomainException,
    ErrorCode,
    InvalidYouTubeUrlException,
    JobFailedError,
    JobNotFoundException,
    PersistenceError,
)
from itinerary_pipeline.domain.models import (
    CLAIMABLE_STATUSES,
    Checkpoint,
    ChunkResult,
    ChunkWindow,
    ExtractedPlace,
    Job,
    JobStage,
    JobStatus,
    PlaceCategory,
    PlaceDraft,
    PlaceItem,
)
from itinerary_pipeline.domain.value_objects import YouTubeVideoId

__all__ = [
    # Exceptions
    "DomainException",
    "ErrorCode",
    "InvalidYouTubeUrlException",
    "JobNotFoundException",
    "CheckpointCorruptedException",
    "PersistenceError",
    "JobFailedError",
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
    # Value Objects
    "YouTubeVideoId",
]

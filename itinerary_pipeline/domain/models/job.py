"""Extraction job domain model and its checkpoint."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from itinerary_pipeline.domain.models.place import ExtractedPlace


class JobStatus(str, Enum):
    """Lifecycle status of an extraction job."""

    PENDING = "PENDING"  # Created, waiting for its first invocation
    PROCESSING = "PROCESSING"  # Owned by exactly one invocation chain
    READY = "READY"  # Itinerary persisted
    FAILED = "FAILED"  # Stopped with an error code; may be resubmitted


# A cold invocation may take ownership only from these states
CLAIMABLE_STATUSES = (JobStatus.PENDING, JobStatus.FAILED)


class JobStage(str, Enum):
    """Sub-phase of a PROCESSING job, shown as progress."""

    FETCH_META = "fetch_meta"
    EXTRACT_PLACES = "extract_places"
    PERSIST = "persist"


class ChunkResult(BaseModel):
    """Places extracted from one analysis window, on the job-global timeline."""

    chunk_index: int = Field(ge=0)
    plan_title: str = ""
    places: list[ExtractedPlace] = Field(default_factory=list)


class Checkpoint(BaseModel):
    """Scratch state that carries a job across invocations."""

    current_chunk_index: int = Field(default=0, ge=0)
    total_chunks: int = Field(default=0, ge=0)
    chunk_results: list[ChunkResult] = Field(default_factory=list)
    failed_chunks: list[int] = Field(default_factory=list)

    def to_fields(self) -> dict[str, Any]:
        """Job document fields holding this checkpoint."""
        return self.model_dump(mode="json")


class Job(BaseModel):
    """One itinerary-extraction request and its processing state."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    source_ref: str = Field(description="Video URL or ID as submitted")
    status: JobStatus = JobStatus.PENDING
    stage: JobStage | None = None
    progress_pct: int = Field(default=0, ge=0, le=100)
    status_message: str | None = None

    error_code: str | None = None
    error_message: str | None = None
    error_detail: dict[str, Any] | None = None

    # Checkpoint, kept as stored; checkpoint() parses it
    current_chunk_index: Any = 0
    total_chunks: Any = 0
    chunk_results: Any = Field(default_factory=list)
    failed_chunks: Any = Field(default_factory=list)

    # Video metadata resolved during fetch_meta
    video_id: str | None = None
    channel_name: str | None = None
    channel_id: str | None = None
    title_ai: str | None = None

    heartbeat_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    parsed_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_processing(self) -> bool:
        return self.status == JobStatus.PROCESSING

    @property
    def is_terminal(self) -> bool:
        return self.status in {JobStatus.READY, JobStatus.FAILED}

    def checkpoint(self) -> Checkpoint:
        """Parse the checkpoint fields.

        Raises:
            pydantic.ValidationError: If the stored checkpoint is malformed.
        """
        return Checkpoint.model_validate(
            {
                "current_chunk_index": self.current_chunk_index,
                "total_chunks": self.total_chunks,
                "chunk_results": self.chunk_results,
                "failed_chunks": self.failed_chunks,
            }
        )

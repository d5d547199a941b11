"""DTOs for itinerary extraction invocations."""

from pydantic import BaseModel, Field

from itinerary_pipeline.domain.exceptions import ErrorCode


class ProcessJobRequest(BaseModel):
    """One invocation of the pipeline for a job."""

    job_id: str = Field(min_length=1, description="ID of the job to process")
    resume_chunk_index: int | None = Field(
        default=None,
        ge=0,
        description="Chunk to continue from; absent for a cold start",
    )

    @property
    def is_resume(self) -> bool:
        return self.resume_chunk_index is not None


class ProcessJobResult(BaseModel):
    """Outcome of one invocation.

    ``reason`` is one of ``completed``, ``continuation``,
    ``already_processing_or_not_found``, ``not_processing`` or ``failed``.
    """

    job_id: str
    ok: bool
    reason: str
    error_code: ErrorCode | None = None
    processed_chunks: int = 0
    total_chunks: int = 0
    places_count: int = 0
    elapsed_ms: float = 0.0


class ProcessJobBody(BaseModel):
    """HTTP body of the process endpoint."""

    resume_chunk_index: int | None = Field(default=None, ge=0)


class ProcessJobAccepted(BaseModel):
    """HTTP response of the process endpoint."""

    accepted: bool = True
    job_id: str
    resume_chunk_index: int | None = None

"""Domain exceptions for the itinerary pipeline."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Terminal failure codes written to a FAILED job."""

    INVALID_SOURCE_REF = "INVALID_SOURCE_REF"
    METADATA_FETCH_FAILED = "METADATA_FETCH_FAILED"
    AI_ANALYSIS_FAILED = "AI_ANALYSIS_FAILED"
    NO_ENTITIES_FOUND = "NO_ENTITIES_FOUND"
    PERSIST_FAILED = "PERSIST_FAILED"
    RESUME_STATE_MISSING = "RESUME_STATE_MISSING"
    UNKNOWN = "UNKNOWN"


class DomainException(Exception):
    """Base exception for domain errors."""


class InvalidYouTubeUrlException(DomainException):
    """Raised when a YouTube URL is invalid or unsupported."""

    def __init__(self, url: str, reason: str = "Invalid URL") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid YouTube URL '{url}': {reason}")


class JobNotFoundException(DomainException):
    """Raised when a job document does not exist."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class CheckpointCorruptedException(DomainException):
    """Raised when a persisted checkpoint cannot be read back."""

    def __init__(self, job_id: str, reason: str) -> None:
        self.job_id = job_id
        self.reason = reason
        super().__init__(f"Checkpoint for job {job_id} is unusable: {reason}")


class PersistenceError(DomainException):
    """Raised when the finalized place items could not be stored."""

    def __init__(self, job_id: str, reason: str) -> None:
        self.job_id = job_id
        self.reason = reason
        super().__init__(f"Persisting places for job {job_id} failed: {reason}")


class JobFailedError(DomainException):
    """Raised inside the pipeline to stop processing and fail the job."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.detail = detail
        super().__init__(f"{code.value}: {message}")

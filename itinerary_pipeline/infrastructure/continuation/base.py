"""Abstract base class for self re-invocation."""

from abc import ABC, abstractmethod


class ContinuationTriggerBase(ABC):
    """Starts a fresh invocation of the pipeline for a job.

    Fire-and-forget: there is no return channel. Implementations log delivery
    problems and never raise, so the caller can return right after triggering.
    """

    @abstractmethod
    async def trigger(self, job_id: str, resume_chunk_index: int) -> None:
        """Request processing of ``job_id`` from ``resume_chunk_index`` on."""

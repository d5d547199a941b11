"""Job document access for the extraction pipeline."""

import math
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from itinerary_pipeline.commons.infrastructure.documentdb.base import DocumentDBBase
from itinerary_pipeline.commons.telemetry import get_logger
from itinerary_pipeline.domain.exceptions import (
    CheckpointCorruptedException,
    ErrorCode,
    JobNotFoundException,
)
from itinerary_pipeline.domain.models import (
    CLAIMABLE_STATUSES,
    Checkpoint,
    Job,
    JobStage,
    JobStatus,
)


def _now() -> datetime:
    return datetime.now(UTC)


class JobStore:
    """Reads and writes job state on the document store.

    Each method is one single-document write, so concurrent invocations only
    ever see whole states. The claim is the only conditional write and the
    only guard against two invocations working on one job.
    """

    def __init__(
        self,
        document_db: DocumentDBBase,
        collection: str = "jobs",
        extract_progress_start: int = 30,
        extract_progress_end: int = 80,
    ) -> None:
        """Initialize the store.

        Args:
            document_db: Document database provider.
            collection: Jobs collection name.
            extract_progress_start: Progress at the first chunk.
            extract_progress_end: Progress once every chunk is analyzed.
        """
        self._db = document_db
        self._collection = collection
        self._progress_start = extract_progress_start
        self._progress_end = extract_progress_end
        self._logger = get_logger(__name__)

    def chunk_progress(self, completed: int, total: int) -> int:
        """Progress percentage after ``completed`` of ``total`` chunks."""
        if total <= 0:
            return self._progress_start
        span = self._progress_end - self._progress_start
        return math.floor(self._progress_start + completed / total * span)

    async def claim(self, job_id: str) -> bool:
        """Move a PENDING or FAILED job to PROCESSING and start a new lifetime.

        Returns:
            True if this caller now owns the job, False if it does not exist
            or is not claimable.
        """
        now = _now()
        claimed = await self._db.update_where(
            self._collection,
            job_id,
            expected={"status": [s.value for s in CLAIMABLE_STATUSES]},
            updates={
                "status": JobStatus.PROCESSING.value,
                "stage": JobStage.FETCH_META.value,
                "progress_pct": 0,
                "status_message": None,
                "error_code": None,
                "error_message": None,
                "error_detail": None,
                **Checkpoint().to_fields(),
                "started_at": now,
                "finished_at": None,
                "heartbeat_at": now,
                "updated_at": now,
            },
        )
        self._logger.info("Claim attempted", extra={"job_id": job_id, "claimed": claimed})
        return claimed

    async def get(self, job_id: str) -> Job:
        """Load a job.

        Raises:
            JobNotFoundException: If the job does not exist.
        """
        doc = await self._db.find_by_id(self._collection, job_id)
        if doc is None:
            raise JobNotFoundException(job_id)
        return Job.model_validate(doc)

    async def find(self, job_id: str) -> Job | None:
        """Load a job, or None if it does not exist."""
        doc = await self._db.find_by_id(self._collection, job_id)
        return Job.model_validate(doc) if doc is not None else None

    async def status(self, job_id: str) -> str | None:
        """Stored status of a job, or None if it does not exist."""
        doc = await self._db.find_by_id(self._collection, job_id)
        return doc.get("status") if doc is not None else None

    async def _write(self, job_id: str, updates: dict[str, Any]) -> None:
        updates["updated_at"] = _now()
        found = await self._db.update(self._collection, job_id, updates)
        if not found:
            raise JobNotFoundException(job_id)

    async def update_progress(
        self,
        job_id: str,
        progress_pct: int,
        stage: JobStage,
        status_message: str,
    ) -> None:
        """Record a progress milestone and refresh the heartbeat."""
        await self._write(
            job_id,
            {
                "progress_pct": progress_pct,
                "stage": stage.value,
                "status_message": status_message,
                "heartbeat_at": _now(),
            },
        )

    async def record_video_info(
        self,
        job_id: str,
        video_id: str,
        channel_name: str,
        channel_id: str,
    ) -> None:
        """Store the canonical video identity resolved during fetch_meta."""
        await self._write(
            job_id,
            {
                "video_id": video_id,
                "channel_name": channel_name or None,
                "channel_id": channel_id or None,
            },
        )

    async def start_extraction(
        self,
        job_id: str,
        total_chunks: int,
        progress_pct: int,
    ) -> None:
        """Write the initial checkpoint of a freshly planned job."""
        await self._write(
            job_id,
            {
                **Checkpoint(total_chunks=total_chunks).to_fields(),
                "stage": JobStage.EXTRACT_PLACES.value,
                "progress_pct": progress_pct,
                "status_message": f"Extracting places... (0/{total_chunks} segments)",
                "heartbeat_at": _now(),
            },
        )

    async def save_checkpoint(self, job_id: str, checkpoint: Checkpoint) -> None:
        """Persist accumulated chunk results and the next chunk to analyze.

        Also derives progress from the number of completed chunks.
        """
        total = checkpoint.total_chunks
        done = checkpoint.current_chunk_index
        await self._write(
            job_id,
            {
                **checkpoint.to_fields(),
                "stage": JobStage.EXTRACT_PLACES.value,
                "progress_pct": self.chunk_progress(done, total),
                "status_message": f"Extracting places... ({done}/{total} segments)",
                "heartbeat_at": _now(),
            },
        )
        self._logger.debug(
            "Checkpoint saved",
            extra={
                "job_id": job_id,
                "current_chunk_index": done,
                "total_chunks": total,
                "chunk_results": len(checkpoint.chunk_results),
                "failed_chunks": len(checkpoint.failed_chunks),
            },
        )

    async def load_checkpoint(self, job_id: str) -> Checkpoint:
        """Read back the checkpoint of a job.

        Raises:
            JobNotFoundException: If the job does not exist.
            CheckpointCorruptedException: If the stored fields do not parse.
        """
        doc = await self._db.find_by_id(self._collection, job_id)
        if doc is None:
            raise JobNotFoundException(job_id)
        try:
            return Checkpoint.model_validate(
                {
                    "current_chunk_index": doc.get("current_chunk_index") or 0,
                    "total_chunks": doc.get("total_chunks") or 0,
                    "chunk_results": doc.get("chunk_results") or [],
                    "failed_chunks": doc.get("failed_chunks") or [],
                }
            )
        except ValidationError as e:
            raise CheckpointCorruptedException(job_id, str(e)) from e

    async def complete(self, job_id: str, title: str | None) -> None:
        """Mark the job READY and drop its checkpoint."""
        now = _now()
        await self._write(
            job_id,
            {
                "status": JobStatus.READY.value,
                "progress_pct": 100,
                "stage": None,
                "status_message": None,
                "title_ai": title,
                "parsed_at": now,
                "finished_at": now,
                "heartbeat_at": now,
                **Checkpoint().to_fields(),
            },
        )

    async def fail(
        self,
        job_id: str,
        code: ErrorCode,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> bool:
        """Mark the job FAILED.

        Best effort: a store error is logged and reported as False, since the
        caller is already handling a failure.
        """
        self._logger.error(
            "Job failed",
            extra={"job_id": job_id, "error_code": code.value, "error_message": message},
        )
        try:
            await self._write(
                job_id,
                {
                    "status": JobStatus.FAILED.value,
                    "error_code": code.value,
                    "error_message": message,
                    "error_detail": detail,
                    "finished_at": _now(),
                },
            )
        except Exception:
            self._logger.exception(
                "Could not record job failure",
                extra={"job_id": job_id, "error_code": code.value},
            )
            return False
        return True

"""Unit tests for JobStore."""

from unittest.mock import AsyncMock

import pytest

from itinerary_pipeline.application.services.job_store import JobStore
from itinerary_pipeline.domain.exceptions import (
    CheckpointCorruptedException,
    ErrorCode,
    JobNotFoundException,
)
from itinerary_pipeline.domain.models import (
    Checkpoint,
    ChunkResult,
    Job,
    JobStage,
    JobStatus,
)
from tests.unit.conftest import place


@pytest.fixture
def store(document_db):
    return JobStore(document_db)


async def _insert(document_db, **fields) -> str:
    job = Job(source_ref="https://youtu.be/dQw4w9WgXcQ", **fields)
    await document_db.insert_many("jobs", [job.model_dump(mode="json")])
    return job.id


class TestClaim:
    """Tests for the conditional claim."""

    @pytest.mark.parametrize("status", [JobStatus.PENDING, JobStatus.FAILED])
    async def test_claimable(self, store, document_db, status):
        job_id = await _insert(document_db, status=status)

        assert await store.claim(job_id) is True

        job = await store.get(job_id)
        assert job.status == JobStatus.PROCESSING
        assert job.stage == JobStage.FETCH_META
        assert job.started_at is not None

    @pytest.mark.parametrize("status", [JobStatus.PROCESSING, JobStatus.READY])
    async def test_not_claimable(self, store, document_db, status):
        job_id = await _insert(document_db, status=status, progress_pct=55)

        assert await store.claim(job_id) is False

        job = await store.get(job_id)
        assert job.status == status
        assert job.progress_pct == 55

    async def test_missing_job(self, store):
        assert await store.claim("missing") is False

    async def test_resets_previous_lifetime(self, store, document_db):
        job_id = await _insert(
            document_db,
            status=JobStatus.FAILED,
            progress_pct=67,
            error_code="UNKNOWN",
            error_message="boom",
            current_chunk_index=3,
            total_chunks=4,
            failed_chunks=[1],
        )

        await store.claim(job_id)

        job = await store.get(job_id)
        assert job.progress_pct == 0
        assert job.error_code is None
        assert job.error_message is None
        assert job.current_chunk_index == 0
        assert job.total_chunks == 0
        assert job.failed_chunks == []
        assert job.finished_at is None


class TestCheckpoint:
    """Tests for checkpoint writes and reads."""

    def test_chunk_progress(self, store):
        assert store.chunk_progress(0, 4) == 30
        assert store.chunk_progress(1, 4) == 42
        assert store.chunk_progress(3, 4) == 67
        assert store.chunk_progress(4, 4) == 80
        assert store.chunk_progress(0, 0) == 30

    async def test_start_extraction(self, store, document_db):
        job_id = await _insert(document_db, status=JobStatus.PROCESSING)

        await store.start_extraction(job_id, total_chunks=4, progress_pct=20)

        job = await store.get(job_id)
        assert job.total_chunks == 4
        assert job.current_chunk_index == 0
        assert job.progress_pct == 20
        assert job.stage == JobStage.EXTRACT_PLACES
        assert job.status_message == "Extracting places... (0/4 segments)"

    async def test_save_and_load_roundtrip(self, store, document_db):
        job_id = await _insert(document_db, status=JobStatus.PROCESSING)
        checkpoint = Checkpoint(
            current_chunk_index=2,
            total_chunks=4,
            chunk_results=[
                ChunkResult(chunk_index=0, plan_title="Osaka", places=[place("Dotonbori", 30)])
            ],
            failed_chunks=[1],
        )

        await store.save_checkpoint(job_id, checkpoint)
        loaded = await store.load_checkpoint(job_id)

        assert loaded == checkpoint
        job = await store.get(job_id)
        assert job.progress_pct == 55
        assert job.status_message == "Extracting places... (2/4 segments)"
        assert job.heartbeat_at is not None

    async def test_load_corrupt_checkpoint(self, store, document_db):
        job_id = await _insert(
            document_db,
            status=JobStatus.PROCESSING,
            total_chunks=4,
            chunk_results=[{"chunk_index": "first"}],
        )

        with pytest.raises(CheckpointCorruptedException) as exc_info:
            await store.load_checkpoint(job_id)
        assert exc_info.value.job_id == job_id

    async def test_load_missing_job(self, store):
        with pytest.raises(JobNotFoundException):
            await store.load_checkpoint("missing")

    async def test_mistyped_fields_still_load_job(self, store, document_db):
        job_id = await _insert(
            document_db,
            status=JobStatus.PROCESSING,
            current_chunk_index="x",
            chunk_results="garbage",
        )

        job = await store.get(job_id)

        assert job.is_processing
        assert await store.status(job_id) == JobStatus.PROCESSING
        with pytest.raises(CheckpointCorruptedException):
            await store.load_checkpoint(job_id)

    async def test_status_of_missing_job(self, store):
        assert await store.status("missing") is None


class TestTerminalWrites:
    """Tests for complete and fail."""

    async def test_complete_clears_checkpoint(self, store, document_db):
        job_id = await _insert(
            document_db,
            status=JobStatus.PROCESSING,
            current_chunk_index=4,
            total_chunks=4,
            chunk_results=[{"chunk_index": 0, "places": []}],
        )

        await store.complete(job_id, "Osaka food tour")

        job = await store.get(job_id)
        assert job.status == JobStatus.READY
        assert job.progress_pct == 100
        assert job.title_ai == "Osaka food tour"
        assert job.chunk_results == []
        assert job.total_chunks == 0
        assert job.parsed_at is not None

    async def test_fail(self, store, document_db):
        job_id = await _insert(document_db, status=JobStatus.PROCESSING)

        written = await store.fail(
            job_id,
            ErrorCode.NO_ENTITIES_FOUND,
            "No places were found in the video",
            {"raw_count": 0},
        )

        assert written is True
        job = await store.get(job_id)
        assert job.status == JobStatus.FAILED
        assert job.error_code == "NO_ENTITIES_FOUND"
        assert job.error_detail == {"raw_count": 0}
        assert job.finished_at is not None

    async def test_fail_is_best_effort(self):
        db = AsyncMock()
        db.update.side_effect = ConnectionError("down")
        store = JobStore(db)

        written = await store.fail("job-1", ErrorCode.UNKNOWN, "boom")

        assert written is False

    async def test_write_to_missing_job_raises(self, store):
        with pytest.raises(JobNotFoundException):
            await store.update_progress("missing", 10, JobStage.FETCH_META, "Fetching")

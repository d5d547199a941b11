"""Itinerary extraction orchestration service."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

from itinerary_pipeline.application.dtos.extraction import (
    ProcessJobRequest,
    ProcessJobResult,
)
from itinerary_pipeline.application.services.chunk_planner import plan_chunks
from itinerary_pipeline.application.services.finalizer import PersistenceFinalizer
from itinerary_pipeline.application.services.job_store import JobStore
from itinerary_pipeline.application.services.place_validation import (
    merge_chunk_results,
    normalize_places,
    shift_timeline,
)
from itinerary_pipeline.commons.infrastructure.documentdb.base import DocumentDBBase
from itinerary_pipeline.commons.settings.models import Settings
from itinerary_pipeline.commons.telemetry import LogContext, get_logger, job_trace
from itinerary_pipeline.domain.exceptions import (
    CheckpointCorruptedException,
    ErrorCode,
    InvalidYouTubeUrlException,
    JobFailedError,
    PersistenceError,
)
from itinerary_pipeline.domain.models import (
    Checkpoint,
    ChunkResult,
    ChunkWindow,
    Job,
    JobStage,
    JobStatus,
)
from itinerary_pipeline.domain.value_objects import YouTubeVideoId
from itinerary_pipeline.infrastructure.continuation.base import (
    ContinuationTriggerBase,
)
from itinerary_pipeline.infrastructure.video_ai.base import VideoAnalyzerBase
from itinerary_pipeline.infrastructure.youtube.base import (
    MetadataFetcherBase,
    MetadataFetchError,
    VideoInfo,
    VideoNotFoundError,
)

# Progress milestones outside the per-chunk range
PROGRESS_FETCH_META = 10
PROGRESS_EXTRACT_START = 20
PROGRESS_PERSIST = 85


class ExtractionService:
    """Drives one job through the extraction pipeline.

    A job is processed by a chain of invocations. The first one claims the
    job; each invocation analyzes chunks until its execution budget runs out,
    checkpoints, and hands off to a fresh invocation through the continuation
    trigger. The job document is the only state shared along the chain.

    Pipeline steps:
    1. Claim (cold start) or validate the checkpoint (resume)
    2. Resolve video metadata and plan chunks
    3. Analyze chunks sequentially, checkpointing after each
    4. Merge, validate and persist places
    5. Mark the job READY
    """

    def __init__(
        self,
        document_db: DocumentDBBase,
        metadata_fetcher: MetadataFetcherBase,
        video_analyzer: VideoAnalyzerBase,
        continuation_trigger: ContinuationTriggerBase,
        settings: Settings,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize extraction service with dependencies.

        Args:
            document_db: Document database holding jobs and place items.
            metadata_fetcher: Video metadata lookup.
            video_analyzer: Per-chunk video analysis service.
            continuation_trigger: Starts the next invocation of a job.
            settings: Application settings.
            clock: Monotonic clock in seconds, for the execution budget.
            sleep: Awaitable sleep used for the inter-chunk delay.
        """
        self._fetcher = metadata_fetcher
        self._analyzer = video_analyzer
        self._trigger = continuation_trigger
        self._pipeline = settings.pipeline
        self._clock = clock
        self._sleep = sleep
        self._logger = get_logger(__name__)

        collections = settings.document_db.collections
        self._jobs = JobStore(
            document_db,
            collection=collections.jobs,
            extract_progress_start=self._pipeline.extract_progress_start,
            extract_progress_end=self._pipeline.extract_progress_end,
        )
        self._finalizer = PersistenceFinalizer(
            document_db,
            collection=collections.place_items,
        )

    @property
    def jobs(self) -> JobStore:
        return self._jobs

    async def process(self, request: ProcessJobRequest) -> ProcessJobResult:
        """Run one invocation for a job.

        Never raises: failures are written to the job and reported in the
        result.

        Args:
            request: Job ID and, for a continuation, the chunk to resume from.

        Returns:
            Outcome of this invocation.
        """
        started = self._clock()
        job_id = request.job_id

        with (
            LogContext(job_id=job_id),
            job_trace(
                job_id,
                metadata={"resume_chunk_index": request.resume_chunk_index},
            ),
        ):
            self._logger.info(
                "Invocation started",
                extra={"resume_chunk_index": request.resume_chunk_index},
            )

            try:
                owned = await self._acquire(request)
            except Exception as e:
                # The job is not owned here, so its state is left untouched
                self._logger.exception("Could not acquire job")
                return self._result(
                    request,
                    started,
                    ok=False,
                    reason="failed",
                    error_code=ErrorCode.UNKNOWN,
                    detail=str(e),
                )

            if not owned:
                reason = (
                    "not_processing"
                    if request.is_resume
                    else "already_processing_or_not_found"
                )
                self._logger.info("Job not acquired", extra={"reason": reason})
                return self._result(request, started, ok=False, reason=reason)

            try:
                job = await self._jobs.get(job_id)
                return await self._run(job, request, started)
            except JobFailedError as e:
                await self._jobs.fail(job_id, e.code, e.message, e.detail)
                return self._result(
                    request,
                    started,
                    ok=False,
                    reason="failed",
                    error_code=e.code,
                )
            except Exception as e:
                self._logger.exception("Unexpected error while processing job")
                await self._jobs.fail(
                    job_id,
                    ErrorCode.UNKNOWN,
                    "Unexpected error while processing the job",
                    {"exception_type": type(e).__name__, "message": str(e)},
                )
                return self._result(
                    request,
                    started,
                    ok=False,
                    reason="failed",
                    error_code=ErrorCode.UNKNOWN,
                )

    async def _acquire(self, request: ProcessJobRequest) -> bool:
        """Take ownership of the job for this invocation.

        A cold start claims the job. A continuation owns it already, as long
        as it is still PROCESSING. Only the stored status is read here, so a
        damaged document is still owned and can be failed.
        """
        if not request.is_resume:
            return await self._jobs.claim(request.job_id)

        return await self._jobs.status(request.job_id) == JobStatus.PROCESSING

    async def _run(
        self,
        job: Job,
        request: ProcessJobRequest,
        started: float,
    ) -> ProcessJobResult:
        video_id = self._parse_source(job.source_ref)

        if not request.is_resume:
            await self._jobs.update_progress(
                job.id,
                PROGRESS_FETCH_META,
                JobStage.FETCH_META,
                "Fetching video info...",
            )

        info = await self._fetch_metadata(video_id)
        windows = plan_chunks(
            info.duration_seconds,
            self._pipeline.chunk_seconds,
            self._pipeline.default_chunk_seconds,
        )
        total = len(windows)

        if request.is_resume:
            checkpoint = await self._resume_checkpoint(
                job.id,
                request.resume_chunk_index or 0,
                total,
            )
        else:
            await self._jobs.record_video_info(
                job.id,
                info.canonical_id,
                info.channel_name,
                info.channel_id,
            )
            checkpoint = Checkpoint(total_chunks=total)
            await self._jobs.start_extraction(job.id, total, PROGRESS_EXTRACT_START)
            self._logger.info(
                "Chunks planned",
                extra={
                    "duration_seconds": info.duration_seconds,
                    "total_chunks": total,
                },
            )

        checkpoint = await self._analyze_chunks(
            job.id,
            video_id.to_url(),
            windows,
            checkpoint,
            started,
        )
        if checkpoint.current_chunk_index < total:
            return self._result(
                request,
                started,
                ok=True,
                reason="continuation",
                processed_chunks=checkpoint.current_chunk_index,
                total_chunks=total,
            )

        places_count = await self._finalize(job.id, info, checkpoint)
        return self._result(
            request,
            started,
            ok=True,
            reason="completed",
            processed_chunks=total,
            total_chunks=total,
            places_count=places_count,
        )

    def _parse_source(self, source_ref: str) -> YouTubeVideoId:
        try:
            return YouTubeVideoId.from_url(source_ref)
        except InvalidYouTubeUrlException as e:
            raise JobFailedError(
                ErrorCode.INVALID_SOURCE_REF,
                "The link is not a supported video URL",
                {"source_ref": source_ref, "reason": e.reason},
            ) from e

    async def _fetch_metadata(self, video_id: YouTubeVideoId) -> VideoInfo:
        try:
            info = await self._fetcher.resolve(video_id.value)
        except VideoNotFoundError as e:
            raise JobFailedError(
                ErrorCode.METADATA_FETCH_FAILED,
                "The video could not be found",
                {"video_id": video_id.value},
            ) from e
        except MetadataFetchError as e:
            raise JobFailedError(
                ErrorCode.METADATA_FETCH_FAILED,
                "Could not read the video info",
                {"video_id": video_id.value, "reason": e.reason},
            ) from e

        self._logger.debug(
            "Video metadata resolved",
            extra={
                "youtube_id": info.canonical_id,
                "title": info.title,
                "duration_seconds": info.duration_seconds,
            },
        )
        return info

    async def _resume_checkpoint(
        self,
        job_id: str,
        resume_index: int,
        plan_length: int,
    ) -> Checkpoint:
        """Load and check the checkpoint a continuation starts from.

        Returns the checkpoint to continue with. If the stored index is ahead
        of the requested one (a duplicate, stale continuation) processing
        starts at the stored index so no chunk is analyzed twice.
        """

        def missing(message: str, **detail: Any) -> JobFailedError:
            return JobFailedError(
                ErrorCode.RESUME_STATE_MISSING,
                message,
                {"resume_chunk_index": resume_index, **detail},
            )

        try:
            checkpoint = await self._jobs.load_checkpoint(job_id)
        except CheckpointCorruptedException as e:
            raise missing("The saved progress could not be read", reason=e.reason) from e

        if checkpoint.total_chunks == 0:
            raise missing("No saved progress to resume from")
        if checkpoint.total_chunks != plan_length:
            raise missing(
                "Saved progress does not match the video",
                total_chunks=checkpoint.total_chunks,
                planned_chunks=plan_length,
            )
        if checkpoint.current_chunk_index > checkpoint.total_chunks:
            raise missing(
                "Saved progress is past the last chunk",
                current_chunk_index=checkpoint.current_chunk_index,
            )
        if resume_index > checkpoint.current_chunk_index:
            raise missing(
                "Resume point is ahead of the saved progress",
                current_chunk_index=checkpoint.current_chunk_index,
            )
        if resume_index < checkpoint.current_chunk_index:
            self._logger.warning(
                "Resume point is behind the saved progress, skipping done chunks",
                extra={
                    "resume_chunk_index": resume_index,
                    "current_chunk_index": checkpoint.current_chunk_index,
                },
            )

        self._logger.info(
            "Resuming from checkpoint",
            extra={
                "current_chunk_index": checkpoint.current_chunk_index,
                "total_chunks": checkpoint.total_chunks,
                "chunk_results": len(checkpoint.chunk_results),
            },
        )
        return checkpoint

    async def _analyze_chunks(
        self,
        job_id: str,
        source_url: str,
        windows: list[ChunkWindow],
        checkpoint: Checkpoint,
        started: float,
    ) -> Checkpoint:
        """Analyze the remaining chunks, checkpointing after each one.

        Returns:
            The last saved checkpoint. Its index is below the chunk count
            when the rest was handed to a continuation.
        """
        total = len(windows)
        results = list(checkpoint.chunk_results)
        failed = list(checkpoint.failed_chunks)
        analyzed = 0

        for window in windows[checkpoint.current_chunk_index :]:
            elapsed = self._clock() - started
            if analyzed > 0 and elapsed > self._pipeline.max_execution_seconds:
                checkpoint = Checkpoint(
                    current_chunk_index=window.index,
                    total_chunks=total,
                    chunk_results=results,
                    failed_chunks=failed,
                )
                await self._jobs.save_checkpoint(job_id, checkpoint)
                self._logger.info(
                    "Execution budget reached, handing off",
                    extra={
                        "elapsed_seconds": round(elapsed, 2),
                        "resume_chunk_index": window.index,
                        "total_chunks": total,
                    },
                )
                await self._trigger.trigger(job_id, window.index)
                return checkpoint

            self._logger.info(
                "Analyzing chunk",
                extra={
                    "chunk_index": window.index,
                    "total_chunks": total,
                    "window": window.label,
                },
            )
            analysis = await self._analyzer.analyze_chunk(source_url, window)
            if analysis is None:
                failed.append(window.index)
                self._logger.warning(
                    "Chunk analysis failed",
                    extra={"chunk_index": window.index},
                )
            elif analysis.places:
                results.append(
                    ChunkResult(
                        chunk_index=window.index,
                        plan_title=analysis.plan_title,
                        places=shift_timeline(analysis.places, window.start_sec),
                    )
                )
            analyzed += 1

            checkpoint = Checkpoint(
                current_chunk_index=window.index + 1,
                total_chunks=total,
                chunk_results=results,
                failed_chunks=failed,
            )
            await self._jobs.save_checkpoint(job_id, checkpoint)

            if window.index < total - 1:
                await self._sleep(self._pipeline.chunk_delay_seconds)

        return checkpoint

    async def _finalize(
        self,
        job_id: str,
        info: VideoInfo,
        checkpoint: Checkpoint,
    ) -> int:
        await self._jobs.update_progress(
            job_id,
            PROGRESS_PERSIST,
            JobStage.PERSIST,
            "Organizing the itinerary...",
        )

        total = checkpoint.total_chunks
        failed = set(checkpoint.failed_chunks)
        if total > 0 and len(failed) >= total:
            raise JobFailedError(
                ErrorCode.AI_ANALYSIS_FAILED,
                "The video could not be analyzed",
                {"failed_chunks": sorted(failed), "total_chunks": total},
            )

        merged = merge_chunk_results(checkpoint.chunk_results)
        drafts = normalize_places(merged)
        if not drafts:
            raise JobFailedError(
                ErrorCode.NO_ENTITIES_FOUND,
                "No places were found in the video",
                {"raw_count": len(merged), "failed_chunks": sorted(failed)},
            )

        try:
            count = await self._finalizer.replace_items(job_id, drafts)
        except PersistenceError as e:
            raise JobFailedError(
                ErrorCode.PERSIST_FAILED,
                "Saving the places failed",
                {"reason": e.reason},
            ) from e

        await self._jobs.complete(job_id, self._itinerary_title(info, checkpoint))
        self._logger.info(
            "Job completed",
            extra={"places_count": count, "failed_chunks": len(failed)},
        )
        return count

    @staticmethod
    def _itinerary_title(info: VideoInfo, checkpoint: Checkpoint) -> str | None:
        """Video title, or the first title the analysis suggested."""
        if info.title.strip():
            return info.title.strip()
        for result in sorted(checkpoint.chunk_results, key=lambda r: r.chunk_index):
            if result.plan_title.strip():
                return result.plan_title.strip()
        return None

    def _result(
        self,
        request: ProcessJobRequest,
        started: float,
        *,
        ok: bool,
        reason: str,
        error_code: ErrorCode | None = None,
        processed_chunks: int = 0,
        total_chunks: int = 0,
        places_count: int = 0,
        detail: str | None = None,
    ) -> ProcessJobResult:
        elapsed_ms = round((self._clock() - started) * 1000, 2)
        self._logger.info(
            "Invocation finished",
            extra={
                "ok": ok,
                "reason": reason,
                "error_code": error_code.value if error_code else None,
                "processed_chunks": processed_chunks,
                "total_chunks": total_chunks,
                "places_count": places_count,
                "elapsed_ms": elapsed_ms,
                "detail": detail,
            },
        )
        return ProcessJobResult(
            job_id=request.job_id,
            ok=ok,
            reason=reason,
            error_code=error_code,
            processed_chunks=processed_chunks,
            total_chunks=total_chunks,
            places_count=places_count,
            elapsed_ms=elapsed_ms,
        )

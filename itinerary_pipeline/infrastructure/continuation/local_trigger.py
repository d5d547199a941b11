"""In-process continuation for local runs."""

import asyncio
from collections.abc import Awaitable, Callable

from itinerary_pipeline.commons.telemetry import get_logger
from itinerary_pipeline.infrastructure.continuation.base import (
    ContinuationTriggerBase,
)

logger = get_logger(__name__)

ContinuationHandler = Callable[[str, int], Awaitable[object]]


class LocalContinuationTrigger(ContinuationTriggerBase):
    """Runs the next invocation as an asyncio task on the current loop.

    The handler is bound after construction because the service that handles
    the continuation is itself built with this trigger.
    """

    def __init__(self, handler: ContinuationHandler | None = None) -> None:
        self._handler = handler
        self._tasks: set[asyncio.Task[object]] = set()

    def bind(self, handler: ContinuationHandler) -> None:
        """Set the coroutine function that processes a resumed job."""
        self._handler = handler

    @property
    def pending(self) -> int:
        """Number of continuations still running."""
        return len(self._tasks)

    async def trigger(self, job_id: str, resume_chunk_index: int) -> None:
        if self._handler is None:
            logger.error(
                "No continuation handler bound",
                extra={"job_id": job_id, "resume_chunk_index": resume_chunk_index},
            )
            return

        task = asyncio.create_task(
            self._run(self._handler, job_id, resume_chunk_index),
            name=f"continuation-{job_id}-{resume_chunk_index}",
        )
        # The loop keeps only weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info(
            "Continuation scheduled",
            extra={"job_id": job_id, "resume_chunk_index": resume_chunk_index},
        )

    async def _run(
        self,
        handler: ContinuationHandler,
        job_id: str,
        resume_chunk_index: int,
    ) -> object:
        try:
            return await handler(job_id, resume_chunk_index)
        except Exception:
            logger.exception(
                "Continuation crashed",
                extra={"job_id": job_id, "resume_chunk_index": resume_chunk_index},
            )
            return None

    async def close(self) -> None:
        """Wait for running continuations to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

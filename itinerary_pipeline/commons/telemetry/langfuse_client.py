"""Langfuse integration for tracing video-analysis calls."""

from __future__ import annotations

import contextlib
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from langfuse import Langfuse

if TYPE_CHECKING:
    from collections.abc import Generator

    from langfuse.client import StatefulGenerationClient, StatefulTraceClient

    from itinerary_pipeline.commons.settings.models import LangfuseSettings

logger = logging.getLogger(__name__)


@dataclass
class _LangfuseState:
    client: Langfuse | None = None
    enabled: bool = False
    current_trace: ContextVar[Any] = field(
        default_factory=lambda: ContextVar("current_trace", default=None)
    )


_state = _LangfuseState()


def init_langfuse(settings: LangfuseSettings) -> None:
    """Initialize the global Langfuse client, or leave tracing disabled."""
    if not settings.enabled:
        logger.info("Langfuse is disabled")
        _state.enabled = False
        return

    if not settings.public_key or not settings.secret_key:
        logger.warning("Langfuse keys not configured, tracing disabled")
        _state.enabled = False
        return

    try:
        _state.client = Langfuse(
            public_key=settings.public_key,
            secret_key=settings.secret_key,
            host=settings.host,
            sample_rate=settings.sample_rate,
        )
        _state.enabled = True
        logger.info("Langfuse initialized", extra={"host": settings.host})
    except Exception as e:
        logger.error("Failed to initialize Langfuse", extra={"error": str(e)})
        _state.enabled = False


def shutdown_langfuse() -> None:
    """Flush pending events and drop the client."""
    if _state.client is not None:
        try:
            _state.client.flush()
            _state.client.shutdown()
        except Exception as e:
            logger.error("Error shutting down Langfuse", extra={"error": str(e)})
        finally:
            _state.client = None
            _state.enabled = False


def is_langfuse_enabled() -> bool:
    return _state.enabled


@contextmanager
def job_trace(
    job_id: str,
    metadata: dict[str, Any] | None = None,
) -> Generator[StatefulTraceClient | None, None, None]:
    """Open one trace for a single pipeline invocation of a job.

    Args:
        job_id: Job being processed; used as the trace session.
        metadata: Optional metadata (e.g. resume index).

    Yields:
        The trace object, or None when tracing is disabled.
    """
    if not _state.enabled or _state.client is None:
        yield None
        return

    token = None
    try:
        trace = _state.client.trace(
            name="process_job",
            session_id=job_id,
            metadata=metadata or {},
            tags=["itinerary-pipeline"],
        )
        token = _state.current_trace.set(trace)
    except Exception as e:
        logger.error("Error creating Langfuse trace", extra={"error": str(e)})
        yield None
        return

    try:
        yield trace
    finally:
        with contextlib.suppress(ValueError):
            _state.current_trace.reset(token)


def start_generation(
    name: str,
    model: str,
    input_payload: Any,
    metadata: dict[str, Any] | None = None,
) -> StatefulGenerationClient | None:
    """Record the start of one AI call under the current trace."""
    if not _state.enabled or _state.client is None:
        return None

    parent = _state.current_trace.get()
    try:
        if parent is None:
            parent = _state.client.trace(name=f"standalone_{name}")
        return parent.generation(
            name=name,
            model=model,
            input=input_payload,
            metadata=metadata or {},
        )
    except Exception as e:
        logger.error("Error creating generation", extra={"error": str(e)})
        return None


def end_generation(
    generation: StatefulGenerationClient | None,
    output: Any,
    level: str = "DEFAULT",
    status_message: str | None = None,
) -> None:
    """Close a generation opened by :func:`start_generation`."""
    if generation is None:
        return
    try:
        generation.end(output=output, level=level, status_message=status_message)
    except Exception as e:
        logger.error("Error ending generation", extra={"error": str(e)})

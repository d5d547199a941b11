"""Telemetry module - logging, timing, and AI call tracing."""

from itinerary_pipeline.commons.telemetry.decorators import LogContext, timed
from itinerary_pipeline.commons.telemetry.langfuse_client import (
    end_generation,
    init_langfuse,
    is_langfuse_enabled,
    job_trace,
    shutdown_langfuse,
    start_generation,
)
from itinerary_pipeline.commons.telemetry.logger import (
    JsonFormatter,
    TextFormatter,
    clear_log_context,
    configure_logging,
    get_correlation_id,
    get_log_context,
    get_logger,
    set_correlation_id,
    set_log_context,
)

__all__ = [
    # Decorators
    "timed",
    "LogContext",
    # Logger
    "get_logger",
    "configure_logging",
    "JsonFormatter",
    "TextFormatter",
    # Correlation ID
    "get_correlation_id",
    "set_correlation_id",
    # Log Context
    "get_log_context",
    "set_log_context",
    "clear_log_context",
    # Langfuse
    "init_langfuse",
    "shutdown_langfuse",
    "is_langfuse_enabled",
    "job_trace",
    "start_generation",
    "end_generation",
]

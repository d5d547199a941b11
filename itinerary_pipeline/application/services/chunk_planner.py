"""Partitioning of a video timeline into analysis windows."""

import math

from itinerary_pipeline.domain.models import ChunkWindow


def plan_chunks(
    duration_seconds: int | float | None,
    window_seconds: int,
    default_seconds: int | None = None,
) -> list[ChunkWindow]:
    """Split ``[0, duration)`` into consecutive half-open windows.

    Windows are ``[0, W), [W, 2W), ...`` and the last one ends exactly at the
    duration (fractional durations are rounded up to whole seconds). When the
    duration is unknown, zero or negative, a single window
    ``[0, default_seconds or W)`` is planned so the video is still analyzed.

    Args:
        duration_seconds: Total video length, if known.
        window_seconds: Window length W.
        default_seconds: Window length used when the duration is unknown.

    Returns:
        Windows in timeline order, indexed from 0.

    Raises:
        ValueError: If ``window_seconds`` is not positive.
    """
    if window_seconds <= 0:
        raise ValueError(f"window_seconds must be positive, got {window_seconds}")

    if duration_seconds is None or duration_seconds <= 0:
        return [
            ChunkWindow(index=0, start_sec=0, end_sec=default_seconds or window_seconds)
        ]

    total = math.ceil(duration_seconds)
    windows: list[ChunkWindow] = []
    start = 0
    while start < total:
        end = min(start + window_seconds, total)
        windows.append(ChunkWindow(index=len(windows), start_sec=start, end_sec=end))
        start = end
    return windows

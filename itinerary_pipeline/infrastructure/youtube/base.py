"""Abstract base class for video metadata lookups."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class VideoInfo:
    """Canonical metadata of a video."""

    canonical_id: str
    title: str
    channel_name: str
    channel_id: str
    duration_seconds: int | None
    thumbnail_url: str | None = None


class VideoNotFoundError(Exception):
    """Raised when the video does not exist or is not accessible."""

    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        super().__init__(f"Video not found: {video_id}")


class MetadataFetchError(Exception):
    """Raised when metadata could not be retrieved."""

    def __init__(self, video_id: str, reason: str) -> None:
        self.video_id = video_id
        self.reason = reason
        super().__init__(f"Metadata fetch failed for {video_id}: {reason}")


class MetadataFetcherBase(ABC):
    """Resolves a video ID to its canonical metadata.

    Implementations:
    - yt-dlp (no API key needed)
    - YouTube Data API v3
    """

    @abstractmethod
    async def resolve(self, video_id: str) -> VideoInfo:
        """Look up a video.

        Args:
            video_id: 11-character YouTube video ID.

        Returns:
            Video metadata. ``duration_seconds`` is None when unknown.

        Raises:
            VideoNotFoundError: If the video doesn't exist.
            MetadataFetchError: If the lookup failed for any other reason.
        """

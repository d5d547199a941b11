"""yt-dlp implementation of the metadata fetcher."""

import asyncio
from pathlib import Path
from typing import Any

import yt_dlp

from itinerary_pipeline.commons.telemetry import get_logger, timed
from itinerary_pipeline.infrastructure.youtube.base import (
    MetadataFetcherBase,
    MetadataFetchError,
    VideoInfo,
    VideoNotFoundError,
)

logger = get_logger(__name__)

# yt-dlp reports these substrings for removed/private/nonexistent videos
_NOT_FOUND_MARKERS = (
    "video unavailable",
    "private video",
    "does not exist",
    "not available",
    "removed",
)


class YtDlpMetadataFetcher(MetadataFetcherBase):
    """Reads video metadata with yt-dlp without downloading media."""

    def __init__(
        self,
        cookies_file: Path | None = None,
        proxy: str | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        """Initialize the fetcher.

        Args:
            cookies_file: Path to a cookies file for age-gated videos.
            proxy: Proxy URL.
            timeout_seconds: Socket timeout passed to yt-dlp.
        """
        self._cookies_file = cookies_file
        self._proxy = proxy
        self._timeout_seconds = timeout_seconds

    def _options(self) -> dict[str, Any]:
        opts: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "extract_flat": False,
            "socket_timeout": self._timeout_seconds,
        }
        if self._cookies_file:
            opts["cookiefile"] = str(self._cookies_file)
        if self._proxy:
            opts["proxy"] = self._proxy
        return opts

    @timed
    async def resolve(self, video_id: str) -> VideoInfo:
        url = f"https://www.youtube.com/watch?v={video_id}"
        opts = self._options()

        def _extract() -> dict[str, Any]:
            with yt_dlp.YoutubeDL(opts) as ydl:
                info = ydl.extract_info(url, download=False)
                if info is None:
                    raise VideoNotFoundError(video_id)
                return dict(info)

        try:
            info = await asyncio.to_thread(_extract)
        except yt_dlp.utils.DownloadError as e:
            message = str(e)
            if any(marker in message.lower() for marker in _NOT_FOUND_MARKERS):
                raise VideoNotFoundError(video_id) from e
            raise MetadataFetchError(video_id, message) from e

        duration = info.get("duration")
        logger.debug(
            "Resolved video metadata",
            extra={"youtube_id": video_id, "duration_seconds": duration},
        )
        return VideoInfo(
            canonical_id=str(info.get("id") or video_id),
            title=info.get("title") or "",
            channel_name=info.get("channel") or info.get("uploader") or "",
            channel_id=info.get("channel_id") or info.get("uploader_id") or "",
            duration_seconds=int(duration) if duration is not None else None,
            thumbnail_url=info.get("thumbnail"),
        )

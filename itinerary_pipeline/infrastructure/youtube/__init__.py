"""Video metadata lookup implementations."""

from itinerary_pipeline.infrastructure.youtube.base import (
    MetadataFetcherBase,
    MetadataFetchError,
    VideoInfo,
    VideoNotFoundError,
)
from itinerary_pipeline.infrastructure.youtube.data_api_fetcher import (
    YouTubeDataApiFetcher,
    parse_iso8601_duration,
)
from itinerary_pipeline.infrastructure.youtube.ytdlp_fetcher import (
    YtDlpMetadataFetcher,
)

__all__ = [
    "MetadataFetcherBase",
    "MetadataFetchError",
    "VideoInfo",
    "VideoNotFoundError",
    "YouTubeDataApiFetcher",
    "YtDlpMetadataFetcher",
    "parse_iso8601_duration",
]

"""Infrastructure layer - external service implementations."""

from itinerary_pipeline.infrastructure.continuation import (
    ContinuationTriggerBase,
    HttpContinuationTrigger,
    LocalContinuationTrigger,
)
from itinerary_pipeline.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from itinerary_pipeline.infrastructure.video_ai import (
    ChunkAnalysis,
    GeminiVideoAnalyzer,
    VideoAnalyzerBase,
)
from itinerary_pipeline.infrastructure.youtube import (
    MetadataFetcherBase,
    MetadataFetchError,
    VideoInfo,
    VideoNotFoundError,
    YouTubeDataApiFetcher,
    YtDlpMetadataFetcher,
)

__all__ = [
    # Factory
    "InfrastructureFactory",
    "get_factory",
    "reset_factory",
    # Metadata
    "MetadataFetcherBase",
    "MetadataFetchError",
    "VideoInfo",
    "VideoNotFoundError",
    "YtDlpMetadataFetcher",
    "YouTubeDataApiFetcher",
    # Video AI
    "VideoAnalyzerBase",
    "ChunkAnalysis",
    "GeminiVideoAnalyzer",
    # Continuation
    "ContinuationTriggerBase",
    "HttpContinuationTrigger",
    "LocalContinuationTrigger",
]

"""Video understanding services."""

from itinerary_pipeline.infrastructure.video_ai.base import (
    ChunkAnalysis,
    VideoAnalyzerBase,
)
from itinerary_pipeline.infrastructure.video_ai.gemini_analyzer import (
    GeminiVideoAnalyzer,
    PayloadParseError,
    parse_analysis_payload,
)

__all__ = [
    # Base classes
    "VideoAnalyzerBase",
    "ChunkAnalysis",
    # Implementations
    "GeminiVideoAnalyzer",
    # Parsing
    "parse_analysis_payload",
    "PayloadParseError",
]

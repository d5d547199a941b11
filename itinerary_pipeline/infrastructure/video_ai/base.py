"""Abstract base class for video understanding services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from itinerary_pipeline.domain.models import ChunkWindow, ExtractedPlace


@dataclass
class ChunkAnalysis:
    """Places found in one window. Timelines are relative to the window start."""

    plan_title: str
    places: list[ExtractedPlace] = field(default_factory=list)


class VideoAnalyzerBase(ABC):
    """Extracts places from one time window of a hosted video.

    Implementations own their retry policy and must never raise: a window
    that cannot be analyzed yields None so the job can carry on.
    """

    @abstractmethod
    async def analyze_chunk(
        self,
        source_url: str,
        window: ChunkWindow,
    ) -> ChunkAnalysis | None:
        """Analyze one window.

        Args:
            source_url: Public URL of the video.
            window: Time window to analyze.

        Returns:
            The analysis (possibly with zero places), or None on failure.
        """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the model used for analysis."""

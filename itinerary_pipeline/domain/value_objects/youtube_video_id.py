"""YouTube Video ID value object."""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from itinerary_pipeline.domain.exceptions import InvalidYouTubeUrlException

VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")

# watch?v=, youtu.be/, embed/, v/, shorts/ and live/ links
_URL_ID_PATTERN = re.compile(
    r"(?:[?&]v=|youtu\.be/|/embed/|/v/|/shorts/|/live/)([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"
)


class YouTubeVideoId(BaseModel):
    """A validated 11-character YouTube video ID.

    Examples:
        >>> YouTubeVideoId.from_url("https://youtu.be/dQw4w9WgXcQ").value
        'dQw4w9WgXcQ'
    """

    model_config = ConfigDict(frozen=True)

    value: Annotated[str, Field(min_length=11, max_length=11)]

    @field_validator("value")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if not VIDEO_ID_PATTERN.match(v):
            msg = f"Invalid YouTube video ID format: '{v}'"
            raise ValueError(msg)
        return v

    @classmethod
    def from_url(cls, source_ref: str) -> YouTubeVideoId:
        """Extract the video ID from a YouTube link or a bare ID.

        Raises:
            InvalidYouTubeUrlException: If no video ID can be found.
        """
        if not source_ref or not isinstance(source_ref, str):
            raise InvalidYouTubeUrlException(str(source_ref), "URL cannot be empty")

        source_ref = source_ref.strip()
        match = _URL_ID_PATTERN.search(source_ref)
        if match:
            return cls(value=match.group(1))
        if VIDEO_ID_PATTERN.match(source_ref):
            return cls(value=source_ref)

        raise InvalidYouTubeUrlException(source_ref, "Could not extract video ID")

    def to_url(self) -> str:
        """Canonical watch URL, the form the video-analysis service accepts."""
        return f"https://www.youtube.com/watch?v={self.value}"

    def __str__(self) -> str:
        return self.value

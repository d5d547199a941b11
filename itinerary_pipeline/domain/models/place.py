"""Place models: raw extraction records and persisted itinerary items."""

import math
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Self
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PlaceCategory(str, Enum):
    """Kind of point of interest."""

    TNA = "TNA"  # Tours and activities: sights, food, experiences
    LODGING = "LODGING"


class ExtractedPlace(BaseModel):
    """A place exactly as the video-analysis service reported it.

    The payload is untrusted, so the schema only guarantees types: wrongly
    typed optional fields parse as None instead of rejecting the record.
    Content rules (trimming, category mapping, clamping) are applied later
    by the place validator.
    """

    model_config = ConfigDict(extra="ignore")

    place_name: str
    category: str | None = None
    timeline_start_sec: float | None = None
    timeline_end_sec: float | None = None
    country: str | None = None
    city: str | None = None
    youtuber_comment: str | None = None
    confidence: float | None = None

    @field_validator(
        "timeline_start_sec", "timeline_end_sec", "confidence", mode="before"
    )
    @classmethod
    def _number_or_none(cls, v: Any) -> float | None:
        if isinstance(v, bool) or not isinstance(v, int | float):
            return None
        if isinstance(v, float) and not math.isfinite(v):
            return None
        return v

    @field_validator("category", "country", "city", "youtuber_comment", mode="before")
    @classmethod
    def _text_or_none(cls, v: Any) -> str | None:
        return v if isinstance(v, str) else None

    def shifted(self, offset_seconds: int) -> Self:
        """Return a copy with timeline values moved by ``offset_seconds``."""
        return self.model_copy(
            update={
                "timeline_start_sec": (
                    None
                    if self.timeline_start_sec is None
                    else self.timeline_start_sec + offset_seconds
                ),
                "timeline_end_sec": (
                    None
                    if self.timeline_end_sec is None
                    else self.timeline_end_sec + offset_seconds
                ),
            }
        )


class PlaceDraft(BaseModel):
    """A validated, normalized place ready to be stored."""

    place_name: str = Field(min_length=1)
    category: PlaceCategory | None = None
    timeline_start_sec: int | None = Field(default=None, ge=0)
    timeline_end_sec: int | None = Field(default=None, ge=0)
    country: str | None = None
    city: str | None = None
    youtuber_comment: str | None = None


class PlaceItem(PlaceDraft):
    """An itinerary entry belonging to one job.

    Visible items (``is_deleted`` False) of a job have unique ``order_index``
    values; the index leaves gaps so entries can be reordered by hand.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    job_id: str
    order_index: int
    is_deleted: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_draft(cls, job_id: str, draft: PlaceDraft, order_index: int) -> Self:
        return cls(job_id=job_id, order_index=order_index, **draft.model_dump())

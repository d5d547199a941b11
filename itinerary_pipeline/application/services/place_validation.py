"""Merging, sanitizing and deduplication of extracted places."""

import math
from collections.abc import Iterable

from itinerary_pipeline.commons.telemetry import get_logger
from itinerary_pipeline.domain.models import (
    ChunkResult,
    ExtractedPlace,
    PlaceCategory,
    PlaceDraft,
)

logger = get_logger(__name__)

# Substrings (upper-cased) that mark a free-form category as accommodation
LODGING_TOKENS = ("LODGING", "HOTEL", "HOSTEL", "MOTEL", "RESORT", "ACCOMMODATION", "숙소")


def shift_timeline(
    places: Iterable[ExtractedPlace],
    offset_seconds: int,
) -> list[ExtractedPlace]:
    """Move chunk-relative timelines onto the video timeline.

    Null timeline values stay null.
    """
    return [place.shifted(offset_seconds) for place in places]


def merge_chunk_results(results: Iterable[ChunkResult]) -> list[ExtractedPlace]:
    """Concatenate places of all chunks in ascending chunk order."""
    merged: list[ExtractedPlace] = []
    for result in sorted(results, key=lambda r: r.chunk_index):
        merged.extend(result.places)
    return merged


def normalize_category(value: str | None) -> PlaceCategory | None:
    """Map a free-form category to the allow-list.

    Exact matches (ignoring case and surrounding spaces) are kept; any other
    non-empty label is LODGING if it mentions accommodation and TNA otherwise.
    """
    if value is None:
        return None
    label = value.strip().upper()
    if not label:
        return None
    if label in PlaceCategory.__members__:
        return PlaceCategory(label)
    if any(token in label for token in LODGING_TOKENS):
        return PlaceCategory.LODGING
    return PlaceCategory.TNA


def _normalize_second(value: float | None) -> int | None:
    if value is None or not math.isfinite(value) or value < 0:
        return None
    return math.floor(value)


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_places(places: Iterable[ExtractedPlace]) -> list[PlaceDraft]:
    """Validate and deduplicate places into storable drafts.

    Records without a usable name are dropped. Names are compared case
    insensitively after trimming and the first occurrence wins, so input
    order (chunk order) decides which duplicate survives.

    Args:
        places: Merged places on the video timeline.

    Returns:
        Drafts in input order. Empty when nothing usable remains.
    """
    drafts: list[PlaceDraft] = []
    seen: set[str] = set()
    raw_count = 0

    for place in places:
        raw_count += 1
        name = place.place_name.strip()
        if not name:
            logger.debug("Skipping place without name")
            continue

        key = name.casefold()
        if key in seen:
            continue
        seen.add(key)

        drafts.append(
            PlaceDraft(
                place_name=name,
                category=normalize_category(place.category),
                timeline_start_sec=_normalize_second(place.timeline_start_sec),
                timeline_end_sec=_normalize_second(place.timeline_end_sec),
                country=_clean_text(place.country),
                city=_clean_text(place.city),
                youtuber_comment=_clean_text(place.youtuber_comment),
            )
        )

    logger.info(
        "Validated places",
        extra={"raw_count": raw_count, "valid_count": len(drafts)},
    )
    return drafts

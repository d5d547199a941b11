"""YouTube Data API v3 implementation of the metadata fetcher."""

import re
from typing import Any

import httpx

from itinerary_pipeline.commons.telemetry import get_logger, timed
from itinerary_pipeline.infrastructure.youtube.base import (
    MetadataFetcherBase,
    MetadataFetchError,
    VideoInfo,
    VideoNotFoundError,
)

logger = get_logger(__name__)

_ISO_DURATION = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)


def parse_iso8601_duration(value: str | None) -> int | None:
    """Convert an ISO 8601 duration such as ``PT1H30M45S`` to seconds.

    Returns:
        Total seconds, or None if the value is missing or not a duration.
    """
    if not value:
        return None
    match = _ISO_DURATION.match(value)
    if not match:
        return None
    parts = {k: int(v) if v else 0 for k, v in match.groupdict().items()}
    return (
        parts["days"] * 86400
        + parts["hours"] * 3600
        + parts["minutes"] * 60
        + parts["seconds"]
    )


class YouTubeDataApiFetcher(MetadataFetcherBase):
    """Reads snippet and contentDetails from the YouTube Data API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.googleapis.com/youtube/v3",
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            api_key: YouTube Data API key.
            base_url: API root URL.
            timeout_seconds: Request timeout.
            transport: Optional httpx transport (used by tests).
        """
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    @timed
    async def resolve(self, video_id: str) -> VideoInfo:
        if not self._api_key:
            raise MetadataFetchError(video_id, "YouTube Data API key not configured")

        try:
            response = await self._client.get(
                "/videos",
                params={
                    "id": video_id,
                    "part": "snippet,contentDetails",
                    "key": self._api_key,
                },
            )
        except httpx.HTTPError as e:
            raise MetadataFetchError(video_id, f"Request failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            logger.error(
                "YouTube Data API error",
                extra={"status_code": response.status_code, "body": response.text[:500]},
            )
            raise MetadataFetchError(video_id, f"HTTP {response.status_code}")

        try:
            items: list[dict[str, Any]] = response.json().get("items") or []
        except ValueError as e:
            raise MetadataFetchError(video_id, "Response is not JSON") from e

        if not items:
            raise VideoNotFoundError(video_id)

        snippet = items[0].get("snippet") or {}
        details = items[0].get("contentDetails") or {}
        thumbnails = snippet.get("thumbnails") or {}
        thumbnail = thumbnails.get("high") or thumbnails.get("default") or {}

        return VideoInfo(
            canonical_id=items[0].get("id") or video_id,
            title=snippet.get("title") or "",
            channel_name=snippet.get("channelTitle") or "",
            channel_id=snippet.get("channelId") or "",
            duration_seconds=parse_iso8601_duration(details.get("duration")),
            thumbnail_url=thumbnail.get("url"),
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
